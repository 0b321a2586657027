import pytest

from parish_pivot.io import TransactionRecord, read_transactions
from parish_pivot.loader import LoadResult
from parish_pivot.periods import FiscalPeriod, period_start_year, sort_period_keys
from parish_pivot.session import PivotSession, export_filename


def _rec(type_, centre, account, total, payee="") -> TransactionRecord:
    return TransactionRecord(
        type=type_,
        date="01/06/2024",
        payee=payee,
        centre_name=centre,
        account_name=account,
        amount=total,
        total_amount=total,
    )


@pytest.fixture
def data() -> LoadResult:
    current = FiscalPeriod(
        key="2024-5",
        records=(
            _rec("Income", "Admin", "Precept", 15000.0, "Council"),
            _rec("Income", "Hall", "Hire", 320.0, "Smith, J"),
            _rec("Expense", "Hall", "Repairs", -1200.0, 'The "Fix" Co'),
            _rec("Expense", "Admin", "Insurance", -640.0, "Insurer"),
            _rec("Transfer", "Admin", "Savings", -2000.0, "Bank"),
        ),
        as_of="30 Nov 2024",
        is_complete=False,
        opening_balance=5000.0,
        source_label="Cashbook Report 30-11-2024.CSV",
    )
    previous = FiscalPeriod(
        key="2023-4",
        records=(
            _rec("Income", "Admin", "Precept", 14000.0, "Council"),
            _rec("Expense", "Hall", "Repairs", -900.0, "Builder"),
        ),
        as_of="31 Mar 2024",
        is_complete=True,
        source_label="Receipts and Payments 2023-4.CSV",
    )
    empty = FiscalPeriod(
        key="2022-3", records=(), as_of="31 Mar 2023", is_complete=True
    )
    periods = {p.key: p for p in (current, previous, empty)}
    return LoadResult(periods=periods, period_keys=list(periods))


def test_session_opens_on_most_recent_period(data) -> None:
    session = PivotSession(data)

    assert session.active_key == "2024-5"
    assert session.heading() == "Financial Year 2024/25"
    assert session.currency_notice() == "Data to: 30 Nov 2024"
    assert [r.label for r in session.rows()] == [
        "Income",
        "Expense",
        "Transfer",
        "Grand Total",
    ]


def test_session_without_periods() -> None:
    session = PivotSession(LoadResult.failed("No CSV files found"))

    assert session.active_key is None
    assert session.heading() == ""
    assert session.summary() is None
    assert session.export_csv() is None
    assert [r.kind for r in session.rows()] == ["grand_total"]


def test_summary_of_active_period(data) -> None:
    summary = PivotSession(data).summary()

    assert summary.income == pytest.approx(15320.0)
    assert summary.expense == pytest.approx(-1840.0)
    assert summary.net == pytest.approx(13480.0)
    assert summary.transaction_count == 5
    assert summary.opening_balance == 5000.0
    assert summary.closing_balance == pytest.approx(18480.0)
    assert summary.has_balances


def test_summary_without_opening_balance(data) -> None:
    session = PivotSession(data)
    session.select_period("2023-4")
    summary = session.summary()

    assert summary.net == pytest.approx(13100.0)
    assert summary.closing_balance is None
    assert not summary.has_balances
    assert session.currency_notice() == "Complete year data"


def test_switching_period_resets_expansion(data) -> None:
    session = PivotSession(data)
    session.toggle("Income")
    session.toggle("Income|Admin")
    assert session.is_expanded("Income")

    session.select_period("2023-4")

    assert len(session.state) == 0
    assert not session.is_expanded("Income")
    assert [r.level for r in session.rows()] == [0, 0, 0]


def test_switching_back_does_not_restore_expansion(data) -> None:
    session = PivotSession(data)
    session.toggle("Expense")
    session.select_period("2023-4")
    session.select_period("2024-5")

    assert not any(r.expanded for r in session.rows())


def test_toggle_returns_rerendered_rows(data) -> None:
    session = PivotSession(data)

    rows = session.toggle(["Expense"])

    assert [(r.level, r.label) for r in rows] == [
        (0, "Income"),
        (0, "Expense"),
        (1, "Admin"),
        (1, "Hall"),
        (0, "Transfer"),
        (0, "Grand Total"),
    ]


def test_select_unknown_period_raises(data) -> None:
    session = PivotSession(data)
    with pytest.raises(KeyError):
        session.select_period("1999-0")
    assert session.active_key == "2024-5"


def test_tabs_mark_incomplete_and_active_periods(data) -> None:
    session = PivotSession(data)
    session.select_period("2023-4")

    tabs = session.tabs()

    assert [t.display_label for t in tabs] == ["2024/25*", "2023/24", "2022/23"]
    assert [t.is_active for t in tabs] == [False, True, False]


def test_export_csv_of_active_period(data) -> None:
    session = PivotSession(data)

    text = session.export_csv()
    lines = text.splitlines()

    assert session.export_filename() == "financial-data-2024-5.csv"
    assert lines[0] == (
        "type,date,payee,reference,vat,centre,centre_name,account,"
        "account_name,amount,total_amount,detail"
    )
    assert len(lines) == 6
    assert '"Smith, J"' in lines[2]
    assert '"The ""Fix"" Co"' in lines[3]


def test_write_export_round_trips_through_reader(data, tmp_path) -> None:
    session = PivotSession(data)

    path = session.write_export(tmp_path / "exports")

    assert path == tmp_path / "exports" / "financial-data-2024-5.csv"
    assert read_transactions(path) == list(data.periods["2024-5"].records)


def test_export_of_empty_period_is_skipped(data, tmp_path) -> None:
    session = PivotSession(data)
    session.select_period("2022-3")

    assert session.export_csv() is None
    assert session.write_export(tmp_path) is None
    assert list(tmp_path.iterdir()) == []


def test_export_filename() -> None:
    assert export_filename("Unknown") == "financial-data-Unknown.csv"


def test_period_keys_sort_by_start_year_descending() -> None:
    keys = ["2022-3", "Unknown", "2025-6", "2023-4"]

    assert sort_period_keys(keys) == ["2025-6", "2023-4", "2022-3", "Unknown"]
    assert period_start_year("2024-5") == 2024
    assert period_start_year("Unknown") == 0


def test_currency_notice_without_date() -> None:
    unknown = FiscalPeriod(key="Unknown", records=(), as_of=None, is_complete=False)

    assert unknown.currency_notice == "Data to: unknown date"
    assert unknown.heading == "Financial Year Unknown"
