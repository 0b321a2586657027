import pytest

from parish_pivot.io import (
    RECORD_FIELDS,
    TransactionRecord,
    load_balances,
    parse_number,
    read_transactions,
    records_to_csv,
)

HEADER = ",".join(RECORD_FIELDS)


def test_read_transactions_trims_headers_and_values(tmp_path) -> None:
    csv_path = tmp_path / "Receipts and Payments 2022-3.CSV"
    csv_path.write_text(
        " type , date ,payee,reference,vat,centre,centre_name,account,"
        "account_name, amount ,total_amount,detail\n"
        "Income , 01/04/2022,  Council ,R1,0,100,Admin,4001,Precept,"
        "1500.00,1500.00, Precept Q1 \n",
        encoding="utf-8",
    )

    records = read_transactions(csv_path)

    assert len(records) == 1
    r = records[0]
    assert r.type == "Income"
    assert r.date == "01/04/2022"
    assert r.payee == "Council"
    assert r.centre_name == "Admin"
    assert r.account_name == "Precept"
    assert r.amount == pytest.approx(1500.0)
    assert r.total_amount == pytest.approx(1500.0)
    assert r.detail == "Precept Q1"


def test_read_transactions_defaults_bad_numbers_to_zero(tmp_path) -> None:
    csv_path = tmp_path / "entries.csv"
    csv_path.write_text(
        HEADER + "\n"
        "Expense,02/04/2022,A,,,1,Admin,5001,Stationery,,-12.50,blank amount\n"
        "Expense,03/04/2022,B,,abc,1,Admin,5001,Stationery,n/a,nan,text values\n"
        "Expense,04/04/2022,C,,inf,1,Admin,5001,Stationery,-3,-3,infinite vat\n",
        encoding="utf-8",
    )

    records = read_transactions(csv_path)

    assert [r.amount for r in records] == [0.0, 0.0, -3.0]
    assert [r.vat for r in records] == [0.0, 0.0, 0.0]
    assert records[0].total_amount == pytest.approx(-12.5)
    assert records[1].total_amount == 0.0


def test_read_transactions_missing_columns_and_short_rows(tmp_path) -> None:
    csv_path = tmp_path / "entries.csv"
    csv_path.write_text(
        "type,date,payee,amount\n"
        "Income,01/04/2022,Council,10\n"
        "Expense,02/04/2022\n",
        encoding="utf-8",
    )

    records = read_transactions(csv_path)

    assert len(records) == 2
    assert records[0].centre_name == ""
    assert records[0].detail == ""
    assert records[0].total_amount == 0.0
    assert records[1].payee == ""
    assert records[1].amount == 0.0


def test_read_transactions_keeps_leading_zeros_and_quoted_text(tmp_path) -> None:
    csv_path = tmp_path / "entries.csv"
    csv_path.write_text(
        HEADER + "\n"
        'Expense,05/04/2022,"Smith, J",00123,0,010,Hall,0400,Repairs,'
        '-40,-40,"Line one\nline two"\n',
        encoding="utf-8",
    )

    [r] = read_transactions(csv_path)

    assert r.payee == "Smith, J"
    assert r.reference == "00123"
    assert r.centre == "010"
    assert r.account == "0400"
    assert r.detail == "Line one\nline two"


def test_read_transactions_keeps_rows_with_extra_fields(tmp_path) -> None:
    csv_path = tmp_path / "entries.csv"
    csv_path.write_text(
        HEADER + "\n"
        "Income,01/04/2022,A,,0,1,Admin,4001,Precept,10,10,first\n"
        "Income,02/04/2022,B,,0,1,Admin,4001,Precept,20,20,second,EXTRA\n"
        "Income,03/04/2022,C,,0,1,Admin,4001,Precept,30,30,third\n",
        encoding="utf-8",
    )

    records = read_transactions(csv_path)

    assert [r.payee for r in records] == ["A", "B", "C"]
    assert records[1].detail == "second"
    assert records[1].total_amount == 20.0
    assert sum(r.total_amount for r in records) == 60.0


def test_read_transactions_empty_and_header_only_files(tmp_path) -> None:
    empty = tmp_path / "empty.csv"
    empty.write_text("", encoding="utf-8")
    header_only = tmp_path / "header.csv"
    header_only.write_text(HEADER + "\n", encoding="utf-8")

    assert read_transactions(empty) == []
    assert read_transactions(header_only) == []


@pytest.mark.parametrize(
    "value, expected",
    [
        ("12.50", 12.5),
        (" -3 ", -3.0),
        ("", 0.0),
        ("   ", 0.0),
        (None, 0.0),
        ("abc", 0.0),
        ("NaN", 0.0),
        (7, 7.0),
        (float("nan"), 0.0),
        (True, 0.0),
    ],
)
def test_parse_number(value, expected) -> None:
    assert parse_number(value) == expected


def test_records_to_csv_header_quoting_and_numbers() -> None:
    records = [
        TransactionRecord(
            type="Expense",
            date="05/04/2022",
            payee="Smith, J",
            detail='Say "hi"',
            amount=-20.0,
            vat=2.5,
            total_amount=-17.5,
        ),
        TransactionRecord(type="", payee="plain"),
    ]

    text = records_to_csv(records)
    lines = text.split("\r\n")

    assert lines[0] == (
        "type,date,payee,reference,vat,centre,centre_name,account,"
        "account_name,amount,total_amount,detail"
    )
    assert lines[1] == 'Expense,05/04/2022,"Smith, J",,2.5,,,,,-20,-17.5,"Say ""hi"""'
    # Missing labels stay empty, never "Unknown"
    assert lines[2] == ",,plain,,0,,,,,0,0,"


def test_csv_export_reads_back_to_the_same_records(tmp_path) -> None:
    records = [
        TransactionRecord(
            type="Income",
            date="01/04/2024",
            payee="County Council",
            reference="INV-001",
            vat=0.0,
            centre="100",
            centre_name="Admin",
            account="4001",
            account_name="Precept",
            amount=12500.0,
            total_amount=12500.0,
            detail="Precept, first half",
        ),
        TransactionRecord(
            type="Expense",
            date="12/05/2024",
            payee='The "Best" Printers',
            reference="0042",
            vat=-2.5,
            centre="200",
            centre_name="Hall",
            account="5100",
            account_name="Printing",
            amount=-12.5,
            total_amount=-15.0,
            detail="Newsletter\nMay edition",
        ),
    ]

    path = tmp_path / "financial-data-2024-5.csv"
    path.write_bytes(records_to_csv(records).encode("utf-8"))

    assert read_transactions(path) == records


@pytest.mark.parametrize("text", ["a\rb", "a\nb", "a\r\nb"])
def test_line_breaks_inside_values_survive_export(tmp_path, text) -> None:
    records = [
        TransactionRecord(type="Expense", payee=text, detail=text, total_amount=-4.0),
        TransactionRecord(type="Income", payee="next", total_amount=9.0),
    ]

    csv_text = records_to_csv(records)
    assert f'"{text}"' in csv_text

    path = tmp_path / "export.csv"
    path.write_bytes(csv_text.encode("utf-8"))

    assert read_transactions(path) == records


def test_load_balances(tmp_path) -> None:
    path = tmp_path / "balances.json"
    path.write_text(
        '{"2024-5": 15234.12, "2023-4": "9800.50", "2022-3": "n/a", "2021-2": null}',
        encoding="utf-8",
    )

    balances = load_balances(path)

    assert balances == {"2024-5": pytest.approx(15234.12), "2023-4": 9800.5}


@pytest.mark.parametrize(
    "content",
    ["not json", "[1, 2, 3]", '"2024-5"', "42"],
)
def test_load_balances_invalid_content_gives_no_balances(tmp_path, content) -> None:
    path = tmp_path / "balances.json"
    path.write_text(content, encoding="utf-8")

    assert load_balances(path) == {}


def test_load_balances_missing_file(tmp_path) -> None:
    assert load_balances(tmp_path / "balances.json") == {}
