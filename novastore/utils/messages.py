"""
novastore/utils/messages.py
───────────────────────────
Short user-facing text for every error kind the API can return.
"""

MESSAGES = {
    # auth
    'unauthenticated':       'Please log in to access this page.',
    'forbidden':             'You are not authorized to perform this action.',
    'login_validation':      'Email and password are required.',
    'invalid_credentials':   'Invalid email or password.',
    'signup_validation':     'Email, password and confirmation are required.',
    'signup_password_min':   'Password must be at least 6 characters.',
    'signup_password_mismatch': 'Passwords do not match.',
    'reserved_email':        'This email address is reserved.',
    'email_exists':          'An account with this email already exists.',
    # import
    'invalid_json':          'The selected file is not valid JSON.',
    'not_an_array':          'The JSON file must contain an array of products.',
    'not_an_object':         'Every product entry must be a JSON object.',
    'invalid_id':            'Every product needs a positive whole-number id.',
    'duplicate_id':          'Product ids must be unique.',
    'invalid_name':          'Every product needs a name.',
    'invalid_price':         'Every product price must be greater than zero.',
    'invalid_stock':         'Stock must be a whole number of zero or more.',
    'invalid_category':      'Every product needs a valid category id.',
    'invalid_image_url':     'Image URL must be text.',
    # product form
    'name_required':         'Product name is required.',
    'name_too_long':         'Product name must be 200 characters or fewer.',
    'price_positive':        'Price must be greater than zero.',
    'stock_non_negative':    'Stock cannot be negative and must be a whole number.',
    'category_required':     'Please select a category.',
    'new_category_required': 'Please enter a name for the new category.',
    'image_url_invalid':     'Image URL must start with http:// or https://.',
    'category_name_required': 'Category name is required.',
    'validation_failed':     'Please correct the highlighted fields.',
    # profile
    'profile_name_required': 'Full name is required.',
    'profile_email_invalid': 'Please enter a valid email address.',
    'profile_field_invalid': 'This field must be text.',
    # catalog / generic
    'not_found':             'The requested item was not found.',
    'seed_load_failure':     'Failed to load catalog data.',
    'import_failed':         'The import could not be saved. No changes were made.',
    'method_not_allowed':    'Method not allowed.',
    'generic_error':         'Something went wrong. Please try again.',
}


def message_for(kind: str) -> str:
    return MESSAGES.get(kind, MESSAGES['generic_error'])


def error_body(kind: str, **extra) -> dict:
    """Standard JSON error payload: {'error': kind, 'message': text, ...}."""
    body = {'error': kind, 'message': message_for(kind)}
    body.update(extra)
    return body
