from flask import Blueprint, jsonify

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Math Challenge quiz server!'})


@main.route('/health')
def health():
    return jsonify({'status': 'ok'})
