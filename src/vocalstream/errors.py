from __future__ import annotations


class VocalStreamError(Exception):
    pass


class InputUnavailable(VocalStreamError):
    pass


class InvalidScript(VocalStreamError, ValueError):
    pass


class ConfigurationOutOfRange(VocalStreamError, ValueError):
    def __init__(self, name: str, value: object, allowed: str):
        super().__init__(f"{name}={value!r} fora do intervalo ({allowed})")
        self.name = name
        self.value = value
        self.allowed = allowed


class NoteFinalized(VocalStreamError):
    def __init__(self, note_id: int):
        super().__init__(f"nota {note_id} ja foi finalizada")
        self.note_id = note_id


class InvalidTransition(VocalStreamError):
    def __init__(self, action: str, state: object):
        super().__init__(f"{action}() nao permitido no estado {state}")
        self.action = action
        self.state = state
