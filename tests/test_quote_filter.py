import logging

from quantlib_api import OptionType
from quantlib_api.models.bs import call_price, put_price
from quantlib_api.vol import OptionQuote, filter_arbitrage


def clean_grid():
    out = []
    for T in [0.25, 0.5, 1.0]:
        for K in [80.0, 90.0, 100.0, 110.0, 120.0]:
            c = call_price(spot=100.0, strike=K, r=0.0, q=0.0, sigma=0.2, tau=T)
            p = put_price(spot=100.0, strike=K, r=0.0, q=0.0, sigma=0.2, tau=T)
            out.append(OptionQuote(OptionType.CALL, K, T, c))
            out.append(OptionQuote(OptionType.PUT, K, T, p))
    return out


def test_clean_grid_is_untouched():
    quotes = clean_grid()
    kept = filter_arbitrage(quotes)
    assert set(kept) == set(quotes)


def test_vertical_spread_violation_drops_quote():
    quotes = [
        OptionQuote(OptionType.CALL, 95.0, 1.0, 12.0),
        OptionQuote(OptionType.CALL, 100.0, 1.0, 7.0),
        OptionQuote(OptionType.CALL, 105.0, 1.0, 8.0),  # rises with strike
        OptionQuote(OptionType.CALL, 110.0, 1.0, 5.0),
    ]
    kept = filter_arbitrage(quotes)
    assert [q.strike for q in kept] == [95.0, 105.0, 110.0]


def test_put_vertical_spread_violation():
    quotes = [
        OptionQuote(OptionType.PUT, 90.0, 1.0, 5.0),
        OptionQuote(OptionType.PUT, 100.0, 1.0, 4.0),
    ]
    kept = filter_arbitrage(quotes)
    assert [q.strike for q in kept] == [100.0]


def test_calendar_spread_violation_drops_shorter_expiry():
    quotes = [
        OptionQuote(OptionType.CALL, 100.0, 0.5, 7.0),
        OptionQuote(OptionType.CALL, 100.0, 1.0, 6.5),
    ]
    kept = filter_arbitrage(quotes)
    assert [q.maturity for q in kept] == [1.0]


def test_butterfly_violation_drops_quote(caplog):
    quotes = [
        OptionQuote(OptionType.CALL, 90.0, 1.0, 12.0, instrument_id="C90"),
        OptionQuote(OptionType.CALL, 100.0, 1.0, 8.0, instrument_id="C100"),
        OptionQuote(OptionType.CALL, 110.0, 1.0, 2.0, instrument_id="C110"),
    ]
    with caplog.at_level(logging.WARNING, logger="quantlib_api.vol.quote_filter"):
        kept = filter_arbitrage(quotes)
    assert [q.instrument_id for q in kept] == ["C100", "C110"]
    assert "C90" in caplog.text
    assert "butterfly" in caplog.text


def test_calls_and_puts_are_checked_separately():
    quotes = [
        OptionQuote(OptionType.CALL, 100.0, 1.0, 8.0),
        OptionQuote(OptionType.PUT, 90.0, 1.0, 1.0),
        OptionQuote(OptionType.PUT, 100.0, 1.0, 3.0),
    ]
    kept = filter_arbitrage(quotes)
    assert len(kept) == 3
    assert kept[0].option_type == OptionType.CALL


def test_tolerance_absorbs_small_noise():
    quotes = [
        OptionQuote(OptionType.CALL, 100.0, 1.0, 8.0),
        OptionQuote(OptionType.CALL, 105.0, 1.0, 8.0005),
    ]
    assert len(filter_arbitrage(quotes)) == 1
    assert len(filter_arbitrage(quotes, tol=1e-3)) == 2
