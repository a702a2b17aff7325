import io

import pytest

from heapsim.demo import main, run_basic_demo, run_comparison, run_sentinel_demo
from heapsim.freelist import DEFAULT_POOL_SIZE


def test_basic_demo_preserves_string_across_realloc():
    buffer = io.StringIO()
    run_basic_demo(buffer)
    text = buffer.getvalue()
    assert "Original string: This is a test string." in text
    assert "String after realloc: This is a test string." in text


def test_basic_demo_reports_every_step():
    buffer = io.StringIO()
    run_basic_demo(buffer)
    text = buffer.getvalue()
    headers = text.count("--- Memory Allocator Statistics ---")
    assert headers > 0
    assert headers == text.count("--- Free List ---")
    assert headers == text.count("Total Frees:")


def test_basic_demo_ends_with_whole_pool_free():
    buffer = io.StringIO()
    run_basic_demo(buffer)
    text = buffer.getvalue()
    last_report = text.rsplit("--- Memory Allocator Statistics ---", 1)[1]
    assert "Total Allocated Memory: 0 bytes" in last_report
    assert f"Total Free Memory:      {DEFAULT_POOL_SIZE} bytes" in last_report
    assert f"Block 0: Address = 0x0, Size = {DEFAULT_POOL_SIZE} bytes" in last_report
    assert "Block 1:" not in last_report


def test_comparison_detects_sentinel_errors():
    buffer = io.StringIO()
    run_comparison(buffer)
    text = buffer.getvalue()
    assert "SENTINEL ERROR: Buffer overflow detected! Canary was smashed." in text
    assert "SENTINEL ERROR: Double-free or invalid pointer detected!" in text
    assert "SENTINEL ERROR: Integer overflow in array allocation request." in text
    assert "SAFELY returned NULL after detecting the overflow." in text


def test_comparison_naive_array_allocation_fails_quietly():
    buffer = io.StringIO()
    run_comparison(buffer)
    text = buffer.getvalue()
    assert "Allocation failed (as expected), but without a clear error." in text
    assert "DANGEROUSLY returned a non-NULL pointer." not in text


def test_sentinel_demo_output():
    buffer = io.StringIO()
    run_sentinel_demo(buffer)
    text = buffer.getvalue()
    assert "String content: This is a test string." in text
    assert "SUCCESS: The fail-safe check correctly prevented the allocation." in text
    assert "--- DEMO COMPLETE ---" in text


def test_sentinel_demo_reports_double_free_once():
    buffer = io.StringIO()
    run_sentinel_demo(buffer)
    text = buffer.getvalue()
    message = "Attempt to free invalid pointer or double-free detected!"
    assert text.count(message) == 1
    # The write at offset 40 lands past the canary, so it goes unnoticed.
    assert "Canary was smashed" not in text


def test_sentinel_demo_pool_reuses_address():
    buffer = io.StringIO()
    run_sentinel_demo(buffer)
    text = buffer.getvalue()
    assert "allocated another at the same address: 0x0" in text


def test_main_runs_single_demo(capsys):
    assert main(["sentinel"]) == 0
    captured = capsys.readouterr().out
    assert "--- DEMO COMPLETE ---" in captured
    assert "SHOWDOWN" not in captured


def test_main_runs_all_by_default(capsys):
    assert main([]) == 0
    captured = capsys.readouterr().out
    assert "Initial state of the allocator:" in captured
    assert "SHOWDOWN" in captured
    assert "--- DEMO COMPLETE ---" in captured


def test_main_rejects_unknown_demo():
    with pytest.raises(SystemExit):
        main(["bogus"])