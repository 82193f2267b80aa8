"""
Engine errors.

Every failure is scoped to the single requested operation. The API maps these
to {"ok": false, "code": ...} responses with the class's status code.
"""


class ShowdownError(Exception):
    code = "InternalError"
    status_code = 500

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.code)
        self.detail = detail or self.code


# --- NotFound ---

class NotFound(ShowdownError):
    code = "NotFound"
    status_code = 404


class MatchNotFound(NotFound):
    code = "MatchNotFound"


class SeasonNotFound(NotFound):
    code = "SeasonNotFound"


class NoEligibleMatch(NotFound):
    code = "NoEligibleMatch"


class NoActiveMatch(NotFound):
    code = "NoActiveMatch"


# --- InvalidState ---

class InvalidState(ShowdownError):
    code = "InvalidState"
    status_code = 400


class MatchNotActive(InvalidState):
    code = "MatchNotActive"


class MatchNotReady(InvalidState):
    code = "MatchNotReady"


# --- InvalidInput ---

class InvalidInput(ShowdownError):
    code = "InvalidInput"
    status_code = 400


class InvalidEntrant(InvalidInput):
    code = "InvalidEntrant"


# --- Conflict ---

class Conflict(ShowdownError):
    code = "Conflict"
    status_code = 409


class AlreadyVoted(Conflict):
    code = "AlreadyVoted"


class WindowClosed(Conflict):
    code = "WindowClosed"


class ActiveMatchExists(Conflict):
    code = "ActiveMatchExists"


# --- Forbidden / store ---

class Forbidden(ShowdownError):
    code = "Forbidden"
    status_code = 403


class StoreError(ShowdownError):
    code = "DatabaseError"
    status_code = 500
