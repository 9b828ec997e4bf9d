"""Error kinds raised by the ranking services and mapped to HTTP responses."""


class RankingError(Exception):
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'error': self.message}


class NotFoundError(RankingError):
    """A player, statistics row, ranking, match or category is absent."""
    status_code = 404


class InvalidArgumentError(RankingError):
    """Malformed pagination, unknown sort field/order or unknown category."""
    status_code = 400
