"""
Confirmation and reminder messages handed off to WhatsApp.

Only the text and the click-to-chat link are produced here; opening the
link is left to the user interface.
"""

import re
from decimal import Decimal
from typing import List, Literal, Sequence
from urllib.parse import quote

from ..config import BusinessConfig
from ..domain.exceptions import MessagingError
from ..domain.models import Appointment, Service
from ..domain.pricing import effective_price, find_service

MessageKind = Literal["confirmacao", "lembrete"]

WHATSAPP_URL = "https://wa.me/{number}?text={text}"


def format_money(value: Decimal, currency_symbol: str = "R$") -> str:
    """
    Format a value the Brazilian way.

    Example: Decimal("1234.5") -> "R$ 1.234,50"
    """
    text = f"{value:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{currency_symbol} {text}"


def format_date_br(date_str: str) -> str:
    """YYYY-MM-DD -> DD/MM/YYYY"""
    year, month, day = date_str.split("-")
    return f"{day}/{month}/{year}"


def service_names(appointment: Appointment, services: Sequence[Service]) -> str:
    """Names of the bundled services still in the catalog, joined with ' + '."""
    names = [
        service.name
        for service in (find_service(services, service_id) for service_id in appointment.service_ids)
        if service is not None
    ]
    return " + ".join(names) if names else "serviço"


def build_message(
    appointment: Appointment,
    services: Sequence[Service],
    kind: MessageKind,
    business: BusinessConfig,
    currency_symbol: str = "R$",
) -> str:
    """
    Render the confirmation or reminder text for an appointment.

    Args:
        appointment: The appointment to announce
        services: Current service catalog
        kind: "confirmacao" for a booking confirmation, "lembrete" for a reminder
        business: Studio details used in header and footer
        currency_symbol: Prefix of the formatted value
    """
    if kind not in ("confirmacao", "lembrete"):
        raise MessagingError(f"Unknown message kind: {kind!r}")

    price = format_money(effective_price(appointment, services), currency_symbol)

    lines: List[str] = [
        business.name.upper(),
        "",
        f"Olá, {appointment.client_name}!",
        "",
    ]

    if kind == "lembrete":
        lines += ["Só passando para lembrar do seu agendamento.", ""]

    lines += [
        f"Data: {format_date_br(appointment.date)}",
        f"Horário: {appointment.time}",
        f"Serviço: {service_names(appointment, services)}",
        f"Valor: {price}",
        "",
    ]

    if kind == "confirmacao":
        lines += ["Qualquer imprevisto é só avisar por aqui, tá bom?"]
    else:
        lines += ["Te espero no horário combinado!", ""]

    if business.address:
        lines += ["Endereço:", *business.address]

    if kind == "confirmacao":
        if business.payment_notes:
            lines += ["", "Formas de pagamento:", *(f"- {note}" for note in business.payment_notes)]
        if business.policy_notes:
            lines += ["", "Recado:", *(f"- {note}" for note in business.policy_notes)]

    return "\n".join(lines).strip() + "\n"


def whatsapp_url(phone: str, text: str, country_code: str = "55") -> str:
    """
    Build a wa.me click-to-chat link.

    Raises:
        MessagingError: If the phone has no digits
    """
    digits = re.sub(r"\D", "", phone or "")
    if not digits:
        raise MessagingError("Este agendamento não tem telefone cadastrado.")

    return WHATSAPP_URL.format(number=f"{country_code}{digits}", text=quote(text, safe=""))
