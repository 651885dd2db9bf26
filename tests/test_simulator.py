# placeholder gateway test scripts
from __future__ import annotations

import csv

import make_csv
from replay import build_request, replay


def test_zipf_weights_sum_to_one() -> None:
    w = make_csv.zipf_weights(5)
    assert abs(w.sum() - 1.0) < 1e-9
    assert list(w) == sorted(w, reverse=True)


def test_generated_rows_are_valid_requests() -> None:
    for gen in (make_csv.gen_zipf, make_csv.gen_uniform, make_csv.gen_flash):
        rows = gen(1, 2, seed=7)
        assert len(rows) == 120
        for ts, w, h, square, text, referrer in rows:
            assert ts.endswith("Z")
            assert (w, h) in make_csv.SIZES
            assert square == "" or square > 0
            assert text == "" or text in make_csv.TEXTS
            assert referrer == "" or referrer in make_csv.REFERRERS


def test_write_csv_and_dry_run_replay(tmp_path) -> None:
    out = tmp_path / "trace.csv"
    make_csv.write_csv(make_csv.gen_uniform(1, 1, seed=1), str(out))

    with open(out, newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 60
    assert set(rows[0]) == {"timestamp", "width", "height", "square", "text", "referrer"}

    assert replay(str(out), "http://127.0.0.1:1", None, dry_run=True) == (60, 0, 0)


def test_build_request_only_sends_present_fields() -> None:
    row = {"width": "300", "height": "250", "square": "", "text": "Logo", "referrer": ""}
    url, params, headers = build_request(row, "http://localhost:8080/")
    assert url == "http://localhost:8080/img/300/250"
    assert params == {"text": "Logo"}
    assert headers == {}

    row["referrer"] = "https://example.com/"
    _, _, headers = build_request(row, "http://localhost:8080")
    assert headers == {"Referer": "https://example.com/"}
