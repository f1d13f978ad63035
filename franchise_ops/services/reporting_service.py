# franchise_ops/services/reporting_service.py
from datetime import date
from typing import Any, Callable, Dict, List, Optional
import csv
import io
import json
import logging

import pandas as pd
from sqlalchemy import func
from sqlalchemy.orm import Session

from franchise_ops.config import config
from franchise_ops.exceptions import ReportingError
from franchise_ops.models import (
    CustomerFeedback, CustomerOrder, DeliveryDetail, Employee, FeedbackInfo,
    Franchise, FranchiseAgreement, FranchiseInventory, FranchiseOwner,
    MenuItem, OrderLine, PurchaseOrder, SalaryDetail, ShiftDetail, ShipmentDetail
)
from franchise_ops.utils.date_utils import add_months, years_between

logger = logging.getLogger(__name__)

SHORT_SHIFT = 'Short Shift'
REGULAR_SHIFT = 'Regular Shift'
LONG_SHIFT = 'Long Shift'

NEEDS_EXPANSION = 'Needs expansion'
ADEQUATE = 'Adequate'

def classify_shift(duration: Optional[float]) -> str:
    """Bucket a shift by its length in hours.

    Under 4 hours is short, 4 to 8 hours inclusive is regular, anything else
    (including an unknown duration) is long.
    """
    if duration is not None and duration < 4:
        return SHORT_SHIFT
    if duration is not None and 4 <= duration <= 8:
        return REGULAR_SHIFT
    return LONG_SHIFT

def format_growth_percentage(current: float, previous: Optional[float]) -> str:
    """Format year-over-year growth as e.g. '12.50%'; '0.00%' without a prior year."""
    if not previous:
        return '0.00%'
    return f"{(current - previous) / previous * 100:.2f}%"

def _to_float(value) -> Optional[float]:
    return None if value is None else float(value)

def _competition_rank(rows: List[Dict], key: Callable[[Dict], Any], field: str) -> None:
    """Assign SQL RANK() style ranks (1, 2, 2, 4) to rows in ``key`` order."""
    previous = object()
    current = 0
    for position, row in enumerate(sorted(rows, key=key), start=1):
        row_key = key(row)
        if row_key != previous:
            current = position
            previous = row_key
        row[field] = current

class ReportingService:
    """Service for franchise performance reports.

    Every report is read-only and returns a list of row dictionaries in the
    report's natural order.
    """

    REPORTS = {
        'menu-feedback': 'menu_feedback_ranking',
        'revenue-growth': 'yearly_revenue_growth',
        'agreement-inventory': 'franchise_agreement_inventory_ranking',
        'shift-patterns': 'shift_pattern_summary',
        'profitability': 'profitability_scores',
        'owner-revenue': 'owner_revenue_ranking',
        'revenue-share': 'revenue_share',
        'staffing': 'staff_to_seating_ratio',
        'revenue-per-employee': 'revenue_per_employee',
        'capacity-expansion': 'capacity_expansion_status'
    }

    def __init__(self, session: Session):
        """Initialize the reporting service.

        Args:
            session: Database session
        """
        self.session = session
        self._reporting_config = config.reporting_config

    def run_report(self, name: str, **kwargs) -> List[Dict]:
        """Run a report by its short name (see ``REPORTS``)."""
        method_name = self.REPORTS.get(name)
        if method_name is None:
            raise ReportingError(
                f"Unknown report: {name}",
                details={'available': sorted(self.REPORTS)}
            )

        logger.info(f"Running report {name}")
        return getattr(self, method_name)(**kwargs)

    def menu_feedback_ranking(self) -> List[Dict]:
        """Rank each franchise's menu items by average customer rating.

        Items without any feedback are left out.
        """
        avg_rating = func.avg(CustomerFeedback.rating)
        feedback_count = func.count(CustomerFeedback.feedback_id)

        menu_feedback = (
            self.session.query(
                Franchise.franchise_id.label('franchise_id'),
                MenuItem.m_item_name.label('item_name'),
                avg_rating.label('avg_feedback_rating'),
                feedback_count.label('total_feedbacks')
            )
            .select_from(MenuItem)
            .outerjoin(OrderLine, MenuItem.m_item_id == OrderLine.m_item_id)
            .outerjoin(CustomerOrder, OrderLine.order_id == CustomerOrder.order_id)
            .outerjoin(FeedbackInfo, CustomerOrder.order_id == FeedbackInfo.order_id)
            .outerjoin(CustomerFeedback, FeedbackInfo.feedback_id == CustomerFeedback.feedback_id)
            .outerjoin(Franchise, CustomerOrder.franchise_id == Franchise.franchise_id)
            .group_by(Franchise.franchise_id, MenuItem.m_item_name)
            .having(Franchise.franchise_id.isnot(None))
            .having(feedback_count > 0)
            .subquery()
        )

        feedback_rank = func.row_number().over(
            partition_by=menu_feedback.c.franchise_id,
            order_by=(menu_feedback.c.avg_feedback_rating.desc(), menu_feedback.c.item_name)
        ).label('feedback_rank')

        rows = (
            self.session.query(
                menu_feedback.c.franchise_id,
                menu_feedback.c.item_name,
                menu_feedback.c.avg_feedback_rating,
                menu_feedback.c.total_feedbacks,
                feedback_rank
            )
            .order_by(menu_feedback.c.franchise_id, feedback_rank)
            .all()
        )

        return [
            {
                'franchise_id': row.franchise_id,
                'item_name': row.item_name,
                'avg_feedback_rating': _to_float(row.avg_feedback_rating),
                'total_feedbacks': row.total_feedbacks,
                'feedback_rank': row.feedback_rank
            }
            for row in rows
        ]

    def yearly_revenue_growth(self) -> List[Dict]:
        """Compare each franchise's yearly revenue with its previous year."""
        order_year = func.extract('year', CustomerOrder.order_date)

        yearly = (
            self.session.query(
                CustomerOrder.franchise_id.label('franchise_id'),
                order_year.label('year'),
                func.sum(CustomerOrder.total_amount).label('total_revenue')
            )
            .group_by(CustomerOrder.franchise_id, order_year)
            .subquery()
        )

        previous_revenue = func.lag(yearly.c.total_revenue).over(
            partition_by=yearly.c.franchise_id,
            order_by=yearly.c.year
        ).label('previous_year_revenue')

        rows = (
            self.session.query(yearly.c.franchise_id, yearly.c.year, yearly.c.total_revenue, previous_revenue)
            .order_by(yearly.c.franchise_id, yearly.c.year)
            .all()
        )

        report = []
        for row in rows:
            total = _to_float(row.total_revenue) or 0.0
            previous = _to_float(row.previous_year_revenue)
            report.append({
                'franchise_id': row.franchise_id,
                'year': int(row.year),
                'total_revenue': total,
                'previous_year_revenue': previous or 0.0,
                'growth': round(total - (previous or 0.0), 2),
                'growth_percentage': format_growth_percentage(total, previous)
            })

        return report

    def franchise_agreement_inventory_ranking(self) -> List[Dict]:
        """Rank franchises by agreement length and by inventory count.

        One row per agreement. Both ranks break ties on franchise ID.
        Franchises without inventory count as zero.
        """
        inventory_counts = dict(
            self.session.query(FranchiseInventory.franchise_id, func.count(FranchiseInventory.inv_id))
            .group_by(FranchiseInventory.franchise_id)
            .all()
        )

        agreements = (
            self.session.query(
                Franchise.franchise_id,
                FranchiseOwner.lname,
                FranchiseOwner.fname,
                FranchiseAgreement.term_start_date,
                FranchiseAgreement.term_end_date
            )
            .select_from(FranchiseAgreement)
            .join(Franchise, FranchiseAgreement.franchise_id == Franchise.franchise_id)
            .join(FranchiseOwner, Franchise.owner_id == FranchiseOwner.owner_id)
            .all()
        )

        report = [
            {
                'franchise_id': row.franchise_id,
                'franchise_owner': f"{row.lname}, {row.fname}",
                'agreement_years': years_between(row.term_start_date, row.term_end_date),
                'total_inventory': inventory_counts.get(row.franchise_id, 0)
            }
            for row in agreements
        ]

        _competition_rank(report, lambda r: (-r['agreement_years'], r['franchise_id']), 'agreement_rank')
        _competition_rank(report, lambda r: (-r['total_inventory'], r['franchise_id']), 'inventory_rank')

        report.sort(key=lambda r: (r['inventory_rank'], r['agreement_rank']))
        return report

    def shift_pattern_summary(self) -> List[Dict]:
        """Summarize shifts by franchise and shift type with CUBE rollups.

        Detail rows come first, then per-franchise totals (shift_type None),
        per-type totals (franchise_id None) and the grand total (both None).
        """
        rows = (
            self.session.query(Franchise.franchise_id, ShiftDetail.shift_duration)
            .join(Employee, Franchise.franchise_id == Employee.franchise_id)
            .join(ShiftDetail, Employee.employee_id == ShiftDetail.employee_id)
            .all()
        )

        if not rows:
            return []

        shifts = pd.DataFrame(rows, columns=['franchise_id', 'shift_duration'])
        shifts['shift_duration'] = pd.to_numeric(shifts['shift_duration'])
        shifts['shift_type'] = shifts['shift_duration'].map(classify_shift)

        aggregations = {
            'total_shifts': ('shift_duration', 'size'),
            'avg_shift_duration': ('shift_duration', 'mean'),
            # SUM over only NULL durations is NULL, not 0
            'total_shift_hours': ('shift_duration', lambda durations: durations.sum(min_count=1))
        }

        grouping_sets = [['franchise_id', 'shift_type'], ['franchise_id'], ['shift_type'], []]
        frames = []
        for keys in grouping_sets:
            if keys:
                frame = shifts.groupby(keys, sort=True).agg(**aggregations).reset_index()
            else:
                frame = pd.DataFrame([{
                    'total_shifts': len(shifts),
                    'avg_shift_duration': shifts['shift_duration'].mean(),
                    'total_shift_hours': shifts['shift_duration'].sum(min_count=1)
                }])
            for column in ('franchise_id', 'shift_type'):
                if column not in keys:
                    frame[column] = None
            frames.append(frame[['franchise_id', 'shift_type', 'total_shifts',
                                 'avg_shift_duration', 'total_shift_hours']])

        cube = pd.concat(frames, ignore_index=True).astype({'franchise_id': object, 'shift_type': object})

        return [
            {
                'franchise_id': None if pd.isna(record.franchise_id) else record.franchise_id,
                'shift_type': None if pd.isna(record.shift_type) else record.shift_type,
                'total_shifts': int(record.total_shifts),
                'avg_shift_duration': None if pd.isna(record.avg_shift_duration) else float(record.avg_shift_duration),
                'total_shift_hours': None if pd.isna(record.total_shift_hours) else float(record.total_shift_hours)
            }
            for record in cube.itertuples(index=False)
        ]

    def profitability_scores(self) -> List[Dict]:
        """Seating capacity per unit of average employee cost, best first."""
        avg_cost = func.avg(SalaryDetail.base_salary + func.coalesce(SalaryDetail.bonus, 0))

        rows = (
            self.session.query(
                Franchise.franchise_id,
                Franchise.city,
                Franchise.seating_capacity,
                avg_cost.label('avg_employee_cost')
            )
            .join(SalaryDetail, Franchise.franchise_id == SalaryDetail.franchise_id)
            .group_by(Franchise.franchise_id, Franchise.city, Franchise.seating_capacity)
            .all()
        )

        report = []
        for row in rows:
            cost = _to_float(row.avg_employee_cost)
            score = None
            if cost and row.seating_capacity is not None:
                score = round(row.seating_capacity / cost, 5)
            report.append({
                'franchise_id': row.franchise_id,
                'city': row.city,
                'seating_capacity': row.seating_capacity,
                'avg_employee_cost': cost,
                'profitability_score': score
            })

        report.sort(key=lambda r: (r['profitability_score'] is None, -(r['profitability_score'] or 0)))
        return report

    def owner_revenue_ranking(self) -> List[Dict]:
        """Rank franchise owners by the total revenue of their franchises."""
        franchise_revenue = (
            self.session.query(
                Franchise.franchise_id.label('franchise_id'),
                Franchise.owner_id.label('owner_id'),
                func.sum(CustomerOrder.total_amount).label('total_revenue')
            )
            .join(CustomerOrder, Franchise.franchise_id == CustomerOrder.franchise_id)
            .group_by(Franchise.franchise_id, Franchise.owner_id)
            .subquery()
        )

        owner_revenue = func.sum(franchise_revenue.c.total_revenue)
        owner_rank = func.rank().over(order_by=owner_revenue.desc()).label('owner_rank')

        rows = (
            self.session.query(
                FranchiseOwner.owner_id,
                FranchiseOwner.fname,
                FranchiseOwner.lname,
                owner_revenue.label('total_owner_revenue'),
                owner_rank
            )
            .select_from(franchise_revenue)
            .join(FranchiseOwner, franchise_revenue.c.owner_id == FranchiseOwner.owner_id)
            .group_by(FranchiseOwner.owner_id, FranchiseOwner.fname, FranchiseOwner.lname)
            .order_by(owner_rank, FranchiseOwner.owner_id)
            .all()
        )

        return [
            {
                'owner_id': row.owner_id,
                'owner_name': f"{row.fname} {row.lname}",
                'total_owner_revenue': _to_float(row.total_owner_revenue),
                'owner_rank': row.owner_rank
            }
            for row in rows
        ]

    def revenue_share(self) -> List[Dict]:
        """Each franchise's share of total company revenue, largest first."""
        total_revenue = _to_float(self.session.query(func.sum(CustomerOrder.total_amount)).scalar())

        franchise_revenue = func.sum(CustomerOrder.total_amount)
        rows = (
            self.session.query(
                Franchise.franchise_id,
                Franchise.city,
                franchise_revenue.label('franchise_revenue')
            )
            .select_from(CustomerOrder)
            .join(Franchise, CustomerOrder.franchise_id == Franchise.franchise_id)
            .group_by(Franchise.franchise_id, Franchise.city)
            .order_by(franchise_revenue.desc(), Franchise.franchise_id)
            .all()
        )

        report = []
        for row in rows:
            revenue = _to_float(row.franchise_revenue) or 0.0
            share = round(revenue * 100.0 / total_revenue, 2) if total_revenue else None
            report.append({
                'franchise_id': row.franchise_id,
                'city': row.city,
                'franchise_revenue': revenue,
                'revenue_share_percentage': share
            })

        return report

    def staff_to_seating_ratio(self) -> List[Dict]:
        """Employees per seat for each staffed franchise, highest first."""
        staff_count = func.count(Employee.employee_id)

        rows = (
            self.session.query(
                Franchise.franchise_id,
                Franchise.city,
                Franchise.seating_capacity,
                staff_count.label('staff_count')
            )
            .join(Employee, Franchise.franchise_id == Employee.franchise_id)
            .group_by(Franchise.franchise_id, Franchise.city, Franchise.seating_capacity)
            .all()
        )

        report = []
        for row in rows:
            ratio = row.staff_count / row.seating_capacity if row.seating_capacity else None
            report.append({
                'franchise_id': row.franchise_id,
                'city': row.city,
                'seating_capacity': row.seating_capacity,
                'staff_count': row.staff_count,
                'staff_to_seating_ratio': ratio
            })

        report.sort(key=lambda r: (r['staff_to_seating_ratio'] is None, -(r['staff_to_seating_ratio'] or 0)))
        return report

    def revenue_per_employee(self) -> List[Dict]:
        """Revenue divided by headcount for each franchise, highest first."""
        revenue = (
            self.session.query(
                CustomerOrder.franchise_id.label('franchise_id'),
                func.sum(CustomerOrder.total_amount).label('total_revenue')
            )
            .group_by(CustomerOrder.franchise_id)
            .subquery()
        )

        staff = (
            self.session.query(
                Employee.franchise_id.label('franchise_id'),
                func.count(Employee.employee_id).label('num_employees')
            )
            .group_by(Employee.franchise_id)
            .subquery()
        )

        rows = (
            self.session.query(
                revenue.c.franchise_id,
                Franchise.city,
                revenue.c.total_revenue,
                staff.c.num_employees
            )
            .select_from(revenue)
            .join(staff, revenue.c.franchise_id == staff.c.franchise_id)
            .join(Franchise, revenue.c.franchise_id == Franchise.franchise_id)
            .filter(staff.c.num_employees > 0)
            .all()
        )

        report = []
        for row in rows:
            total = _to_float(row.total_revenue) or 0.0
            report.append({
                'franchise_id': row.franchise_id,
                'city': row.city,
                'total_revenue': total,
                'num_employees': row.num_employees,
                'revenue_per_employee': round(total / row.num_employees, 2)
            })

        report.sort(key=lambda r: -r['revenue_per_employee'])
        return report

    def capacity_expansion_status(self, as_of: Optional[date] = None) -> List[Dict]:
        """Flag franchises whose recent purchases per seat far exceed the average.

        Purchases are linked to a franchise through deliveries of shipments
        of the purchased material within the lookback window.

        Args:
            as_of: End of the lookback window, defaults to today
        """
        as_of = as_of or date.today()
        cutoff = add_months(as_of, -self._reporting_config['lookback_months'])
        threshold = self._reporting_config['expansion_threshold']

        purchases = (
            self.session.query(
                DeliveryDetail.franchise_id.label('franchise_id'),
                func.sum(PurchaseOrder.purchase_qty).label('total_purchases')
            )
            .select_from(DeliveryDetail)
            .join(ShipmentDetail, DeliveryDetail.tracking_id == ShipmentDetail.tracking_id)
            .join(PurchaseOrder, ShipmentDetail.material_id == PurchaseOrder.material_id)
            .filter(DeliveryDetail.delivery_date >= cutoff)
            .group_by(DeliveryDetail.franchise_id)
            .subquery()
        )

        rows = (
            self.session.query(
                Franchise.franchise_id,
                Franchise.city,
                Franchise.seating_capacity,
                purchases.c.total_purchases
            )
            .join(purchases, Franchise.franchise_id == purchases.c.franchise_id)
            .all()
        )

        ratios = []
        for row in rows:
            if not row.seating_capacity:
                logger.warning(f"Franchise {row.franchise_id} has no seating capacity, skipped")
                continue
            ratios.append((row, row.total_purchases / row.seating_capacity))

        if not ratios:
            return []

        average = sum(ratio for _, ratio in ratios) / len(ratios)

        report = [
            {
                'franchise_id': row.franchise_id,
                'city': row.city,
                'seating_capacity': row.seating_capacity,
                'total_purchases': int(row.total_purchases),
                'purchases_per_seat': round(ratio, 2),
                'avg_purchases_per_seat': round(average, 2),
                'capacity_status': NEEDS_EXPANSION if ratio > average * threshold else ADEQUATE
            }
            for row, ratio in sorted(ratios, key=lambda item: -item[1])
        ]

        return report

    @staticmethod
    def export_report(rows: List[Dict], fmt: str = 'csv') -> str:
        """Render report rows as CSV or JSON text.

        Args:
            rows: Report rows
            fmt: 'csv' or 'json'

        Returns:
            Rendered report
        """
        if fmt == 'json':
            return json.dumps(rows, indent=2, default=str)

        if fmt == 'csv':
            output = io.StringIO()
            if rows:
                writer = csv.DictWriter(output, fieldnames=list(rows[0].keys()))
                writer.writeheader()
                writer.writerows(rows)
            return output.getvalue()

        raise ReportingError(f"Unsupported export format: {fmt}", details={'formats': ['csv', 'json']})
