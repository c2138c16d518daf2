class DuelError(Exception):
    pass


class DuelInvalidInputError(DuelError):
    pass


class DuelNotFoundError(DuelError):
    pass


class DuelOpponentNotFoundError(DuelNotFoundError):
    pass


class DuelTestNotFoundError(DuelNotFoundError):
    pass


class DuelCourseNotFoundError(DuelNotFoundError):
    pass


class DuelBranchNotFoundError(DuelNotFoundError):
    pass


class DuelUserNotFoundError(DuelNotFoundError):
    pass


class DuelResultNotFoundError(DuelNotFoundError):
    pass


class DuelAccessError(DuelError):
    pass


class DuelInvalidStateError(DuelError):
    pass
