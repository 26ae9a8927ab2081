from __future__ import annotations


def main() -> None:
    # [START QUICKSTART]
    from datetime import date

    from quantlib_api import (
        InstrumentType,
        ModelParameters,
        OptionSpec,
        OptionType,
        PricingModel,
        Quote,
        build_curve,
        price_bond,
        price_option,
    )

    quotes = [
        Quote("DEP_3M", 0.25, 0.0300, InstrumentType.DEPOSIT),
        Quote("DEP_6M", 0.50, 0.0310, InstrumentType.DEPOSIT),
        Quote("SWAP_2Y", 2.0, 0.0320, InstrumentType.SWAP),
        Quote("SWAP_5Y", 5.0, 0.0330, InstrumentType.SWAP),
    ]
    curve = build_curve(date(2024, 1, 2), quotes, "log_linear")
    print(curve.to_frame())

    spec = OptionSpec(spot=100.0, strike=100.0, maturity=1.0, option_type=OptionType.CALL)
    params = ModelParameters(volatility=0.20, curve=curve)

    for model in PricingModel:
        res = price_option(spec, params, model=model)
        print(f"{model.value:>12}: {res.price:.6f}  greeks={res.greeks}  se={res.std_error}")

    print("Bond:", price_bond(curve, maturity=4.5, coupon_rate=0.04, frequency=2))
    # [END QUICKSTART]


if __name__ == "__main__":
    main()
