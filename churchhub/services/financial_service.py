from collections import OrderedDict
from decimal import Decimal, ROUND_HALF_UP

from churchhub.models import FinancialRecord, RecordType
from churchhub.repositories import TenantRepository
from churchhub.validators import parse_financial_record

records = TenantRepository(FinancialRecord)

ALLOCATION_LIMIT = 10
CHART_COLORS = ["#8b5cf6", "#06b6d4", "#f59e0b", "#10b981", "#ec4899", "#6366f1"]

# Donations are made through an external payment app; nothing is processed here.
GIVING_OPTIONS = [
    {
        "title": "Tithes & Offerings",
        "description": "Support the ongoing ministry and operations of our church.",
    },
    {
        "title": "Missions",
        "description": "Help us reach the world with the gospel message.",
    },
    {
        "title": "Building Fund",
        "description": "Contribute to facility improvements and expansion.",
    },
]


class FinancialService:
    @staticmethod
    def get_public_allocations(scope, selected_church_id=None):
        """The most recent public expenses and their share per category."""
        expenses = records.list(
            scope,
            order_by=[FinancialRecord.record_date.desc(), FinancialRecord.id.desc()],
            filters=[
                FinancialRecord.is_public.is_(True),
                FinancialRecord.record_type == RecordType.EXPENSE.value,
            ],
            limit=ALLOCATION_LIMIT,
            selected_church_id=selected_church_id,
            allow_public_selection=True,
        )

        totals = OrderedDict()
        for record in expenses:
            totals[record.category] = totals.get(record.category, Decimal("0")) + Decimal(record.amount)

        grand_total = sum(totals.values(), Decimal("0"))
        allocation = []
        if grand_total > 0:
            for index, (category, value) in enumerate(totals.items()):
                allocation.append(
                    {
                        "name": category,
                        "value": int((value / grand_total * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)),
                        "color": CHART_COLORS[index % len(CHART_COLORS)],
                    }
                )

        return {
            "allocations": [record.to_dict() for record in expenses],
            "allocation_chart": allocation,
            "giving_options": GIVING_OPTIONS,
        }

    @staticmethod
    def get_managed_records(scope, selected_church_id=None):
        results = records.list(
            scope,
            order_by=[FinancialRecord.record_date.desc(), FinancialRecord.id.desc()],
            selected_church_id=selected_church_id,
        )
        income = sum(
            (Decimal(r.amount) for r in results if r.record_type == RecordType.INCOME.value), Decimal("0")
        )
        expense = sum(
            (Decimal(r.amount) for r in results if r.record_type == RecordType.EXPENSE.value), Decimal("0")
        )
        return {
            "records": [record.to_dict() for record in results],
            "totals": {
                "income": str(income),
                "expense": str(expense),
                "balance": str(income - expense),
            },
        }

    @staticmethod
    def create_record(scope, data, selected_church_id=None):
        return records.create(scope, parse_financial_record(data), selected_church_id)

    @staticmethod
    def update_record(scope, record_id, data):
        return records.update(scope, record_id, parse_financial_record(data, partial=True))

    @staticmethod
    def delete_record(scope, record_id):
        return records.delete(scope, record_id)
