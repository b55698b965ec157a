from flask import Blueprint, jsonify

from lifelessons import firestore_dao as dao

bp = Blueprint('stats', __name__, url_prefix='/stats')


@bp.route('/top-contributors')
def top_contributors():
    return jsonify({'contributors': dao.get_top_contributors()})


@bp.route('/author/<email>')
def author_stats(email):
    return jsonify({'totalLessons': dao.count_public_lessons_by_author(email)})
