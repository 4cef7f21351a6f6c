from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user

from frota import db, limiter
from frota.models import Checklist
from frota.schemas import ChecklistSubmission, default_checklist_items
from frota.services.submissions import ChecklistService
from frota.utils.error_handler import error_handler, AuthorizationError, NotFoundError
from frota.utils.security import role_required

checklists_bp = Blueprint('checklists', __name__, url_prefix='/api/checklists')


def check_submitter(operator_id):
    """Operators submit on their own behalf; admins may submit for anyone."""
    if operator_id != current_user.id and not current_user.is_admin:
        raise AuthorizationError('Operators can only submit their own records')


def submission_rate_limit():
    return current_app.config['SUBMISSION_RATE_LIMIT']


@checklists_bp.route('', methods=['POST'])
@login_required
@limiter.limit(submission_rate_limit)
@error_handler
def create_checklist():
    submission = ChecklistSubmission.from_dict(request.get_json(silent=True),
                                               default_operator_id=current_user.id)
    check_submitter(submission.operator_id)
    
    checklist, created = ChecklistService.create(submission, request.headers.get('Idempotency-Key'))
    
    if created:
        return jsonify({'id': checklist.id}), 201
    return jsonify({'id': checklist.id, 'duplicate': True}), 200


@checklists_bp.route('', methods=['GET'])
@login_required
def list_checklists():
    vehicle_id = request.args.get('vehicle_id', type=int)
    limit = min(request.args.get('limit', 100, type=int), 500)
    checklists = ChecklistService.list(vehicle_id=vehicle_id, limit=limit)
    return jsonify({'checklists': [checklist.to_dict() for checklist in checklists]})


@checklists_bp.route('/<int:checklist_id>', methods=['GET'])
@login_required
@error_handler
def get_checklist(checklist_id):
    checklist = db.session.get(Checklist, checklist_id)
    if checklist is None:
        raise NotFoundError(f'Checklist {checklist_id} not found')
    return jsonify(checklist.to_dict())


@checklists_bp.route('/<int:checklist_id>', methods=['DELETE'])
@login_required
@role_required('admin')
@error_handler
def delete_checklist(checklist_id):
    ChecklistService.delete(checklist_id)
    return '', 204


@checklists_bp.route('/default-items', methods=['GET'])
@login_required
def default_items():
    return jsonify({'items': [item.to_dict() for item in default_checklist_items()]})
