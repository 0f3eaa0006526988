from __future__ import annotations

from core.services.paystubs import PaystubSummary, PaystubView

from .schemas import ChartPoint, EarningsBreakdownOut, PaystubOut, PaystubViewResponse


def paystub_payload(stub: PaystubSummary) -> PaystubOut:
    b = stub.breakdown
    return PaystubOut(
        id=stub.id,
        month=stub.month,
        period_start=stub.period_start.isoformat() if stub.period_start else None,
        period_end=stub.period_end.isoformat() if stub.period_end else None,
        hours_worked=stub.hours_worked,
        base_rate=stub.base_rate,
        breakdown=EarningsBreakdownOut(
            base_pay=b.base_pay,
            bonus=b.bonus,
            overtime=b.overtime,
            total_earnings=b.total_earnings,
            total_deductions=b.total_deductions,
            net_pay=b.net_pay,
        ),
    )


def paystub_view_payload(view: PaystubView) -> PaystubViewResponse:
    return PaystubViewResponse(
        employee_id=view.employee_id,
        name=view.name,
        months=view.months,
        chart=[ChartPoint(label=label, net=net) for label, net in view.chart],
        current=paystub_payload(view.current) if view.current else None,
        paystubs=[paystub_payload(s) for s in view.stubs],
    )
