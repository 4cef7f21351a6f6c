from datetime import timedelta

from flask import Blueprint, request, jsonify
from flask_login import login_required

from frota.services.reporting import ReportingService
from frota.utils.error_handler import error_handler
from frota.utils.helpers import parse_date, utcnow

reports_bp = Blueprint('reports', __name__, url_prefix='/api/reports')


def report_window():
    """``start``/``end`` query parameters, defaulting to the last 30 days."""
    today = utcnow().date()
    end = request.args.get('end')
    start = request.args.get('start')
    end = parse_date(end, 'end') if end else today
    start = parse_date(start, 'start') if start else end - timedelta(days=29)
    return start, end


@reports_bp.route('/fuel-consumption')
@login_required
@error_handler
def fuel_consumption():
    start, end = report_window()
    bucket = request.args.get('bucket', 'month')
    vehicle_id = request.args.get('vehicle_id', type=int)
    
    rows = ReportingService().fuel_consumption(start, end, bucket=bucket, vehicle_id=vehicle_id)
    return jsonify({
        'start': start.isoformat(),
        'end': end.isoformat(),
        'bucket': bucket,
        'rows': rows
    })


@reports_bp.route('/fuel-types')
@login_required
@error_handler
def fuel_types():
    start, end = report_window()
    return jsonify({
        'start': start.isoformat(),
        'end': end.isoformat(),
        'fuel_types': ReportingService().fuel_type_breakdown(start, end)
    })
