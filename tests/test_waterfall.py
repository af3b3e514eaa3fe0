"""
Tests for the payment and adjustment waterfalls.

Pure functions; no database access.
"""

from decimal import Decimal

from django.test import SimpleTestCase

from apps.core.exceptions import AmountExceedsBalanceError
from apps.loans.waterfall import (
    OpenPeriod,
    PeriodAllocation,
    plan_adjustment,
    plan_payment,
    split_period,
)

D = Decimal
PPP = D('100')


def periods(*balances):
    """OpenPeriod rows numbered from 1, scheduled_payment_id == payment_number."""
    return [OpenPeriod(n, n, D(b)) for n, b in enumerate(balances, start=1)]


class SplitPeriodTests(SimpleTestCase):

    def test_full_period(self):
        self.assertEqual(split_period(D('120'), PPP), (D('20'), D('100')))

    def test_partially_paid_period_is_all_principal(self):
        self.assertEqual(split_period(D('70'), PPP), (D('0'), D('70')))


class PlanPaymentTests(SimpleTestCase):

    def test_single_full_period(self):
        """120 on a fresh period: interest 20, principal 100."""
        plan = plan_payment(periods('120', '120'), D('120'), PPP)
        self.assertEqual(plan.allocations, [PeriodAllocation(1, D('120'))])
        self.assertEqual(plan.interest_paid, D('20'))
        self.assertEqual(plan.principal_paid, D('100'))
        self.assertFalse(plan.paid_off)

    def test_spills_into_next_period(self):
        """150 over two periods of 120: interest 40, principal 110."""
        plan = plan_payment(periods('120', '120'), D('150'), PPP)
        self.assertEqual(
            plan.allocations,
            [PeriodAllocation(1, D('120')), PeriodAllocation(2, D('30'))],
        )
        self.assertEqual(plan.interest_paid, D('40'))
        self.assertEqual(plan.principal_paid, D('110'))
        self.assertEqual(plan.interest_paid + plan.principal_paid, D('150'))

    def test_partial_less_than_interest(self):
        plan = plan_payment(periods('120'), D('15'), PPP)
        self.assertEqual(plan.interest_paid, D('15'))
        self.assertEqual(plan.principal_paid, D('0'))

    def test_oldest_period_first(self):
        rows = [OpenPeriod(7, 2, D('120')), OpenPeriod(3, 1, D('120'))]
        plan = plan_payment(rows, D('100'), PPP)
        self.assertEqual(plan.allocations, [PeriodAllocation(3, D('100'))])

    def test_skips_settled_periods(self):
        plan = plan_payment(periods('0', '120'), D('50'), PPP)
        self.assertEqual(plan.allocations, [PeriodAllocation(2, D('50'))])

    def test_partially_paid_period_then_next(self):
        """A 70 remainder is pure principal; the next period pays interest first."""
        plan = plan_payment(periods('70', '120'), D('100'), PPP)
        self.assertEqual(
            plan.allocations,
            [PeriodAllocation(1, D('70')), PeriodAllocation(2, D('30'))],
        )
        self.assertEqual(plan.interest_paid, D('20'))
        self.assertEqual(plan.principal_paid, D('80'))

    def test_exact_total_pays_off(self):
        plan = plan_payment(periods('120', '120'), D('240'), PPP)
        self.assertTrue(plan.paid_off)
        self.assertEqual(plan.interest_paid, D('40'))
        self.assertEqual(plan.principal_paid, D('200'))

    def test_one_cent_short_does_not_pay_off(self):
        plan = plan_payment(periods('120', '120'), D('239.99'), PPP)
        self.assertFalse(plan.paid_off)

    def test_exceeding_balance_raises(self):
        with self.assertRaises(AmountExceedsBalanceError):
            plan_payment(periods('120', '120'), D('240.01'), PPP)

    def test_fifo_never_touches_later_period_early(self):
        plan = plan_payment(periods('120', '120', '120'), D('119.99'), PPP)
        touched = {a.scheduled_payment_id for a in plan.allocations}
        self.assertEqual(touched, {1})


class PlanAdjustmentTests(SimpleTestCase):

    def test_interest_pass_spans_periods(self):
        """30 forgiven: 20 interest from period 1, 10 from period 2."""
        plan = plan_adjustment(periods('120', '120'), D('30'), PPP)
        self.assertEqual(
            plan.allocations,
            [PeriodAllocation(1, D('20')), PeriodAllocation(2, D('10'))],
        )
        self.assertEqual(plan.interest_adjusted, D('30'))
        self.assertEqual(plan.principal_adjusted, D('0'))

    def test_principal_pass_after_all_interest(self):
        """60 forgiven: 40 interest across both periods, then 20 principal on period 1."""
        plan = plan_adjustment(periods('120', '120'), D('60'), PPP)
        self.assertEqual(
            plan.allocations,
            [PeriodAllocation(1, D('40')), PeriodAllocation(2, D('20'))],
        )
        self.assertEqual(plan.interest_adjusted, D('40'))
        self.assertEqual(plan.principal_adjusted, D('20'))

    def test_full_forgiveness(self):
        plan = plan_adjustment(periods('120', '120'), D('240'), PPP)
        self.assertTrue(plan.paid_off)
        self.assertEqual(
            plan.allocations,
            [PeriodAllocation(1, D('120')), PeriodAllocation(2, D('120'))],
        )
        self.assertEqual(plan.interest_adjusted, D('40'))
        self.assertEqual(plan.principal_adjusted, D('200'))

    def test_partially_paid_period_has_no_interest(self):
        plan = plan_adjustment(periods('50', '120'), D('30'), PPP)
        self.assertEqual(
            plan.allocations,
            [PeriodAllocation(2, D('20')), PeriodAllocation(1, D('10'))],
        )
        self.assertEqual(plan.interest_adjusted, D('20'))
        self.assertEqual(plan.principal_adjusted, D('10'))

    def test_sum_of_allocations_equals_amount(self):
        plan = plan_adjustment(periods('120', '95', '120'), D('211.50'), PPP)
        self.assertEqual(sum(a.amount for a in plan.allocations), D('211.50'))
        self.assertEqual(plan.interest_adjusted + plan.principal_adjusted, D('211.50'))

    def test_exceeding_balance_raises(self):
        with self.assertRaises(AmountExceedsBalanceError):
            plan_adjustment(periods('120'), D('120.01'), PPP)
