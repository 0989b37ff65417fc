# drapes/auth/routes.py

from flask import Blueprint, request, jsonify, session

from drapes.auth.utils import TOKEN_KEY, service_client

bp = Blueprint('auth', __name__, url_prefix='/auth')


@bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or request.form
    creds = service_client().login(data.get('username', ''), data.get('password', ''))
    if creds is None:
        return jsonify(success=False, error='invalid username or password'), 401
    session[TOKEN_KEY] = creds.token
    return jsonify(success=True)


@bp.route('/logout', methods=['POST'])
def logout():
    session.pop(TOKEN_KEY, None)
    return jsonify(success=True)
