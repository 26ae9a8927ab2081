from __future__ import annotations


def main() -> None:
    # [START IMPLIED_VOL]
    from quantlib_api import OptionSpec, OptionType, flat_curve, implied_volatility_result
    from quantlib_api.vol import (
        OptionQuote,
        filter_arbitrage,
        implied_forward_curve,
        implied_vol_points,
        points_to_frame,
    )

    curve = flat_curve(0.05)
    spec = OptionSpec(spot=100.0, strike=100.0, maturity=1.0, option_type=OptionType.CALL)

    res = implied_volatility_result(spec, curve, 10.0)
    rr = res.root_result
    print(f"IV: {res.vol:.6f}")
    print(f"Converged: {rr.converged}  iters={rr.iterations}  method={rr.method}")
    print(f"f(root)={rr.f_at_root:.3e}  bracket={rr.bracket}  bounds={res.bounds}")

    quotes = [
        OptionQuote("call", 95.0, 0.5, 9.60),
        OptionQuote("put", 95.0, 0.5, 2.30),
        OptionQuote("call", 105.0, 0.5, 4.20),
        OptionQuote("put", 105.0, 0.5, 6.60),
        OptionQuote("call", 95.0, 1.0, 12.70),
        OptionQuote("put", 95.0, 1.0, 3.40),
        OptionQuote("call", 105.0, 1.0, 7.60),
        OptionQuote("put", 105.0, 1.0, 7.50),
    ]
    clean = filter_arbitrage(quotes)
    forwards = implied_forward_curve(clean, curve)
    print("Forward at 0.75y:", forwards(0.75))
    print(points_to_frame(implied_vol_points(clean, 100.0, curve)))
    # [END IMPLIED_VOL]


if __name__ == "__main__":
    main()
