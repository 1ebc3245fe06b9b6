from flask import Blueprint

main = Blueprint('main', __name__)

from novastore.main import routes  # noqa: F401, E402
