import multiprocessing
import os

# Gunicorn Production Configuration
# Workers: (2x CPU Count) + 1 is the official recommendation for typical IO-bound apps
bind = os.environ.get('BIND', '0.0.0.0:8000')
workers = int(os.environ.get('WEB_CONCURRENCY', multiprocessing.cpu_count() * 2 + 1))
worker_class = 'sync'

# Resilience
timeout = 60
max_requests = 1000
max_requests_jitter = 100
keepalive = 5

# Logging
accesslog = '-'       # Stdout
errorlog = '-'        # Stderr
loglevel = 'info'
capture_output = True
