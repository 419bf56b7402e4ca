import contextlib
from datetime import date

from bundle_ledger.config import DEFAULT_LORRY_TYPES
from bundle_ledger.term_ui import FORM_FIELDS, prompt_arrival_form
from bundle_ledger.validation import validate

# Compatibility import across prompt_toolkit versions
try:  # pragma: no cover - fallback path depends on library version
    from prompt_toolkit.input import create_pipe_input
except Exception:  # pragma: no cover - defensive
    from prompt_toolkit.input.defaults import create_pipe_input

from prompt_toolkit import PromptSession
from prompt_toolkit.output import DummyOutput


@contextlib.contextmanager
def pipe_session():
    with create_pipe_input() as pipe:
        sess = PromptSession(input=pipe, output=DummyOutput())
        yield pipe, sess


_ANSWERS = {
    "date": "2024-03-01",
    "lorry_type": "VRL",
    "lorry_no": "LR-7",
    "city": "Tiruppur",
    "party_name": "Sri Balaji",
    "account_type": "T",
    "bundle": "B2",
    "invoice_no": "INV-9",
    "invoice_date": "2024-02-27",
    "amount": "1200",
    "phone_no": "",
    "status": "OPEN",
    "itemtype": "Towel",
}


def test_form_collects_every_field_in_order():
    with pipe_session() as (pipe, sess):
        for f in FORM_FIELDS:
            pipe.send_text(_ANSWERS[f.name] + "\r")
        result = prompt_arrival_form(sess, lorry_types=DEFAULT_LORRY_TYPES)
    assert result == _ANSWERS
    assert validate(result, [], lorry_types=DEFAULT_LORRY_TYPES) == {}


def test_form_defaults_are_kept_with_enter():
    stored = {
        **_ANSWERS,
        "date": date(2024, 3, 1),
        "invoice_date": date(2024, 2, 27),
        "amount": 1200.0,
        "phone_no": None,
    }
    with pipe_session() as (pipe, sess):
        pipe.send_text("\r" * len(FORM_FIELDS))
        result = prompt_arrival_form(sess, lorry_types=DEFAULT_LORRY_TYPES, defaults=stored)
    assert result == _ANSWERS


def test_form_replaces_a_default_value():
    with pipe_session() as (pipe, sess):
        for f in FORM_FIELDS:
            if f.name == "bundle":
                # Ctrl-A (home), Ctrl-K (kill to end), type the new value
                pipe.send_text("\x01\x0bB9\r")
            else:
                pipe.send_text("\r")
        result = prompt_arrival_form(sess, lorry_types=DEFAULT_LORRY_TYPES, defaults=_ANSWERS)
    assert result["bundle"] == "B9"
    assert result["party_name"] == "Sri Balaji"


def test_unparseable_date_and_amount_are_reprompted():
    with pipe_session() as (pipe, sess):
        for f in FORM_FIELDS:
            if f.name == "date":
                # Rejected on Enter; clear the buffer and type a valid date
                pipe.send_text("31/03/2024\r\x01\x0b2024-03-01\r")
            elif f.name == "amount":
                pipe.send_text("twelve\r\x01\x0b1200\r")
            else:
                pipe.send_text(_ANSWERS[f.name] + "\r")
        result = prompt_arrival_form(sess, lorry_types=DEFAULT_LORRY_TYPES)
    assert result == _ANSWERS
