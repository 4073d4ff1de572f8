"""VAT calculator: add VAT to a net amount or extract it from a gross one."""

from decimal import Decimal
from typing import NamedTuple

from config import load_yaml_config
from tradetax.calculators.errors import ConfigurationError, InvalidInput
from tradetax.calculators.inputs import ensure_money, quantize_money


class VatResult(NamedTuple):
    """Net, VAT and gross amounts at a VAT rate."""

    net: Decimal
    vat: Decimal
    gross: Decimal
    rate: Decimal


def vat_rate(name: str | None = None) -> Decimal:
    """Look up a named VAT rate (standard, reduced, zero) from allowances.yaml."""
    config = load_yaml_config("allowances.yaml")["vat"]
    key = name or config["default"]
    try:
        return Decimal(str(config["rates"][key]))
    except KeyError:
        valid = ", ".join(sorted(config["rates"]))
        raise InvalidInput(f"Unknown VAT rate: {key}. Must be one of: {valid}") from None
    except ArithmeticError as e:
        raise ConfigurationError(f"Invalid VAT rate for {key} in allowances.yaml") from e


def _rate(rate: Decimal | None) -> Decimal:
    if rate is None:
        return vat_rate()
    rate = ensure_money(rate, "rate")
    if rate > 1:
        raise InvalidInput("VAT rate must be a fraction, e.g. 0.20 for 20%.")
    return rate


def add_vat(net: Decimal, rate: Decimal | None = None) -> VatResult:
    """Add VAT to a net amount. VAT is rounded to the nearest penny."""
    net = ensure_money(net, "net")
    rate = _rate(rate)
    vat = quantize_money(net * rate)
    return VatResult(net=net, vat=vat, gross=net + vat, rate=rate)


def remove_vat(gross: Decimal, rate: Decimal | None = None) -> VatResult:
    """Split a VAT-inclusive amount into net and VAT.

    The net amount is rounded to the nearest penny and VAT is the remainder,
    so net + VAT always equals the gross amount.
    """
    gross = ensure_money(gross, "gross")
    rate = _rate(rate)
    net = quantize_money(gross / (1 + rate))
    return VatResult(net=net, vat=gross - net, gross=gross, rate=rate)
