from flask import Blueprint, jsonify

from lifelessons import firestore_dao as dao
from lifelessons.decorators import auth_required, admin_required, get_current_email, require_valid_id
from lifelessons.errors import NotFound
from lifelessons.firestore_models import Report
from lifelessons.forms import ReportForm

bp = Blueprint('reports', __name__, url_prefix='/reports')


@bp.route('', methods=['POST'])
@auth_required
def create_report():
    form = ReportForm().require_valid()
    lesson_id = require_valid_id(form.lessonId.data, 'Valid lessonId is required')

    report_id = dao.create_report(Report(
        lessonId=lesson_id,
        reporterEmail=get_current_email(),
        reason=form.reason.data,
        message=form.message.data,
    ))
    return jsonify({'acknowledged': True, 'insertedId': report_id})


@bp.route('')
@admin_required
def list_reports():
    return jsonify(dao.list_reports())


@bp.route('/<report_id>/resolve', methods=['PATCH'])
@admin_required
def resolve_report(report_id):
    require_valid_id(report_id, 'Invalid report id')
    if not dao.resolve_report(report_id):
        raise NotFound('Report not found')
    return jsonify({'matchedCount': 1, 'modifiedCount': 1})


@bp.route('/<report_id>', methods=['DELETE'])
@admin_required
def delete_report(report_id):
    require_valid_id(report_id, 'Invalid report id')
    if not dao.delete_report(report_id):
        raise NotFound('Report not found')
    return jsonify({'success': True})
