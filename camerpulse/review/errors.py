class ReviewError(Exception):
    pass


class ReviewNotFound(ReviewError):
    pass


class ReviewConflict(ReviewError):
    """The generation already carries a review decision."""


class ConfigKeyRejected(ReviewError):
    pass
