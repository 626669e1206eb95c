import pytest

from hospital import print_access_token
from hospital.auth import jwt_handler


def test_main_prints_token_for_registered_doctor(scheduling_db, doctor, monkeypatch, capsys) -> None:
    monkeypatch.setattr(print_access_token, 'SessionLocal', lambda: scheduling_db)

    print_access_token.main(['  HOUSE@medicare.org '])

    token = capsys.readouterr().out.strip()
    assert jwt_handler.decode_access_token(token)['sub'] == 'house@medicare.org'


def test_main_exits_for_unknown_doctor(scheduling_db, monkeypatch, capsys) -> None:
    monkeypatch.setattr(print_access_token, 'SessionLocal', lambda: scheduling_db)

    with pytest.raises(SystemExit) as exit_info:
        print_access_token.main(['nobody@medicare.org'])

    assert exit_info.value.code == 1
    assert 'No doctor registered' in capsys.readouterr().err


def test_main_requires_exactly_one_argument(capsys) -> None:
    with pytest.raises(SystemExit) as exit_info:
        print_access_token.main([])

    assert exit_info.value.code == 2
    assert 'Usage' in capsys.readouterr().err
