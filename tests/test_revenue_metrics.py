"""Tests for revenue and dashboard metrics."""

from datetime import date, timedelta

import pytest

from models.invoices import Invoice
from services.revenue_metrics import (
    ClientTotal,
    MonthlyTotal,
    compute_basic_metrics,
    compute_revenue_metrics,
    compute_small_business_monitor,
    compute_vat_simulation,
    extract_invoice_years,
    monthly_totals_for_year,
    per_client_totals,
)


def test_revenue_metrics_current_year(sample_invoices, today):
    metrics = compute_revenue_metrics(sample_invoices, today=today)

    # 1000 + 500 + 300 in 2024, first invoice in March, today is June 15th (day 167)
    assert metrics.total_ytd == 1800.0
    assert metrics.average_monthly == 450.0
    assert metrics.projected_annual == pytest.approx(1800.0 / 167 * 365)


def test_revenue_metrics_ignore_future_and_deleted_invoices(sample_invoices, today):
    extra = [
        Invoice(id="f", invoice_number="090", invoice_date=date(2024, 9, 1), total=5000.0),
        Invoice(id="d", invoice_number="091", invoice_date=date(2024, 4, 1), total=700.0, isDeleted=True),
    ]
    metrics = compute_revenue_metrics(sample_invoices + extra, today=today)
    assert metrics.total_ytd == 1800.0


def test_revenue_metrics_past_year(sample_invoices, today):
    metrics = compute_revenue_metrics(sample_invoices, year=2023, today=today)
    assert metrics.total_ytd == 1200.0
    assert metrics.projected_annual == 1200.0
    assert metrics.average_monthly == 100.0


def test_revenue_metrics_empty_year(sample_invoices, today):
    metrics = compute_revenue_metrics(sample_invoices, year=2020, today=today)
    assert (metrics.total_ytd, metrics.projected_annual, metrics.average_monthly) == (0, 0, 0)


def test_revenue_metrics_floor_at_zero(today):
    invoices = [Invoice(id="r", invoice_number="001", invoice_date=date(2024, 2, 1), total=-400.0)]
    metrics = compute_revenue_metrics(invoices, today=today)
    assert (metrics.total_ytd, metrics.projected_annual, metrics.average_monthly) == (0, 0, 0)


def test_net_total_falls_back_to_items():
    invoice = Invoice(
        id="i", invoice_number="001",
        items=[{"name": "A", "quantity": 2, "price": 50}, {"name": "B", "quantity": 1, "price": 25}],
    )
    assert invoice.net_total == 125


def test_monthly_totals_for_year(sample_invoices):
    assert monthly_totals_for_year(sample_invoices, 2024) == [
        MonthlyTotal("2024-03", 1000.0),
        MonthlyTotal("2024-04", 300.0),
        MonthlyTotal("2024-05", 500.0),
    ]


def test_per_client_totals(sample_invoices):
    assert per_client_totals(sample_invoices, 2024) == [
        ClientTotal("Acme", 1500.0),
        ClientTotal("Globex", 300.0),
    ]


def test_extract_invoice_years(sample_invoices):
    assert extract_invoice_years(sample_invoices, today=date(2026, 1, 5)) == [2026, 2024, 2023]


def test_basic_metrics(sample_invoices, today):
    metrics = compute_basic_metrics(sample_invoices, today=today)

    assert metrics.total_all_time == 3000.0
    assert metrics.total_ytd == 1800.0
    assert metrics.total_mtd == 0
    assert metrics.unpaid_total == 1300.0
    assert metrics.outstanding_count == 2
    assert metrics.paid_total_ytd == 500.0
    assert metrics.num_invoices_ytd == 3
    assert metrics.average_invoice_ytd == 600.0
    assert [c.client for c in metrics.top_clients_ytd] == ["Acme", "Globex"]
    assert metrics.top_client_share_ytd == pytest.approx(1500 / 1800)


def test_vat_simulation_splits_invoices(today):
    invoices = [
        Invoice(id="a", invoice_number="001", invoice_date=date(2024, 2, 1), total=1000.0),
        Invoice(id="b", invoice_number="002", invoice_date=date(2024, 3, 1), total=500.0,
                client_vat_id="ATU12345678"),
        Invoice(id="c", invoice_number="003", invoice_date=date(2024, 4, 1), total=300.0,
                client_vat_id="DE123456789", tax_exemption_reason="Kleinunternehmer nach § 19 UStG"),
        Invoice(id="d", invoice_number="004", invoice_date=date(2024, 5, 1), total=200.0,
                client_vat_exempt=True),
        Invoice(id="e", invoice_number="005", invoice_date=date(2024, 5, 2), total=-100.0),
        Invoice(id="f", invoice_number="006", invoice_date=date(2023, 5, 2), total=900.0),
        Invoice(id="g", invoice_number="007", invoice_date=date(2024, 5, 3), total=900.0, isDeleted=True),
    ]

    vat = compute_vat_simulation(invoices, today=today, rate_percent=19)

    assert vat.rate == 19
    assert (vat.taxable_net_ytd, vat.reverse_charge_net_ytd, vat.non_taxable_net_ytd) == (1000, 500, 500)
    assert vat.net_invariant.vat_due == pytest.approx(190.0)
    assert vat.net_invariant.gross_increase == pytest.approx(190.0)
    assert vat.gross_invariant.net_after_vat == pytest.approx(1000 / 1.19)
    assert vat.gross_invariant.vat_due == pytest.approx(1000 - 1000 / 1.19)
    assert vat.gross_invariant.revenue_delta == pytest.approx(1000 / 1.19 - 1000)


def test_vat_simulation_default_rate(sample_invoices, today):
    vat = compute_vat_simulation(sample_invoices, today=today)
    assert vat.rate == 19
    assert vat.taxable_net_ytd == 1800.0


def test_small_business_monitor_projects_crossing_date():
    today = date(2024, 1, 10)
    invoices = [
        Invoice(id="a", invoice_number="001", invoice_date=date(2023, 6, 1), total=30000.0),
        Invoice(id="b", invoice_number="002", invoice_date=date(2024, 1, 5), total=1000.0),
    ]

    monitor = compute_small_business_monitor(invoices, today=today)

    assert monitor.previous_year_total == 30000.0
    assert monitor.previous_year_exceeded
    assert monitor.current_year_total_ytd == 1000.0
    # 100 per day so far
    assert monitor.current_year_projection == pytest.approx(36500.0)
    assert not monitor.current_year_projection_exceeded
    assert monitor.current_year_threshold_remaining == 49000.0
    assert monitor.estimated_crossing_date == today + timedelta(days=490)


def test_small_business_monitor_past_the_limit(today):
    invoices = [Invoice(id="a", invoice_number="001", invoice_date=date(2024, 2, 1), total=52000.0)]

    monitor = compute_small_business_monitor(invoices, today=today)

    assert monitor.current_year_projection_exceeded
    assert monitor.current_year_threshold_remaining == -2000.0
    assert monitor.estimated_crossing_date is None
    assert not monitor.previous_year_exceeded


def test_small_business_monitor_without_revenue(today):
    monitor = compute_small_business_monitor([], today=today)
    assert monitor.current_year_projection == 0
    assert monitor.estimated_crossing_date is None
