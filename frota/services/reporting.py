from datetime import datetime, timedelta

from sqlalchemy import func

from frota import db
from frota.models import Supply, Vehicle
from frota.utils.error_handler import ValidationError


BUCKETS = ('day', 'month')


class ReportingService:
    """Read-only aggregations over the supply log, computed in SQL."""

    def _bucket_expression(self, column, bucket):
        if bucket not in BUCKETS:
            raise ValidationError(f"Invalid bucket: {bucket!r} (expected 'day' or 'month')")

        if bucket == 'day':
            return func.date(column)

        dialect = db.session.get_bind().dialect.name
        if dialect == 'sqlite':
            return func.strftime('%Y-%m', column)
        if dialect == 'mysql':
            return func.date_format(column, '%Y-%m')
        return func.to_char(column, 'YYYY-MM')

    def _window(self, start, end):
        if start > end:
            raise ValidationError('start must not be after end')
        # end date is inclusive
        return datetime.combine(start, datetime.min.time()), \
            datetime.combine(end + timedelta(days=1), datetime.min.time())

    def fuel_consumption(self, start, end, bucket='month', vehicle_id=None):
        """Liters, spend and supply count per period and vehicle."""
        window_start, window_end = self._window(start, end)
        period = self._bucket_expression(Supply.supplied_at, bucket).label('period')

        query = db.session.query(
            period,
            Supply.vehicle_id,
            Vehicle.plate,
            func.sum(Supply.liters).label('liters'),
            func.sum(Supply.total_value).label('total_value'),
            func.count(Supply.id).label('supplies')
        ).join(Vehicle, Vehicle.id == Supply.vehicle_id).filter(
            Supply.supplied_at >= window_start,
            Supply.supplied_at < window_end
        )
        if vehicle_id:
            query = query.filter(Supply.vehicle_id == vehicle_id)

        rows = query.group_by(period, Supply.vehicle_id, Vehicle.plate) \
            .order_by(period, Vehicle.plate).all()

        report = []
        for row in rows:
            liters = float(row.liters or 0)
            total_value = float(row.total_value or 0)
            report.append({
                'period': str(row.period),
                'vehicle_id': row.vehicle_id,
                'plate': row.plate,
                'liters': round(liters, 2),
                'total_value': round(total_value, 2),
                'supplies': row.supplies,
                'average_price': round(total_value / liters, 3) if liters else None,
            })
        return report

    def fuel_type_breakdown(self, start, end):
        """Totals per fuel type over the window."""
        window_start, window_end = self._window(start, end)

        rows = db.session.query(
            Supply.fuel_type,
            func.sum(Supply.liters).label('liters'),
            func.sum(Supply.total_value).label('total_value'),
            func.count(Supply.id).label('supplies')
        ).filter(
            Supply.supplied_at >= window_start,
            Supply.supplied_at < window_end
        ).group_by(Supply.fuel_type).order_by(Supply.fuel_type).all()

        return {
            row.fuel_type: {
                'liters': round(float(row.liters or 0), 2),
                'total_value': round(float(row.total_value or 0), 2),
                'supplies': row.supplies,
            }
            for row in rows
        }
