from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user

from frota import limiter
from frota.controllers.checklists import check_submitter, submission_rate_limit
from frota.schemas import SupplySubmission
from frota.services.submissions import SupplyService
from frota.utils.error_handler import error_handler

supplies_bp = Blueprint('supplies', __name__, url_prefix='/api/supplies')


@supplies_bp.route('', methods=['POST'])
@login_required
@limiter.limit(submission_rate_limit)
@error_handler
def create_supply():
    submission = SupplySubmission.from_dict(request.get_json(silent=True),
                                            default_operator_id=current_user.id)
    check_submitter(submission.operator_id)
    
    supply, created = SupplyService.create(submission, request.headers.get('Idempotency-Key'))
    
    if created:
        return jsonify({'id': supply.id}), 201
    return jsonify({'id': supply.id, 'duplicate': True}), 200


@supplies_bp.route('', methods=['GET'])
@login_required
def list_supplies():
    vehicle_id = request.args.get('vehicle_id', type=int)
    limit = min(request.args.get('limit', 100, type=int), 500)
    supplies = SupplyService.list(vehicle_id=vehicle_id, limit=limit)
    return jsonify({'supplies': [supply.to_dict() for supply in supplies]})
