class RatesError(Exception):
    pass


class InvalidCurrencyError(RatesError):
    pass


class SourceFetchError(RatesError):
    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


class CurrencyDataNotFoundError(RatesError):
    def __init__(self, request: str):
        super().__init__(
            f'No information found for the currency you requested: "{request}". Please try later'
        )
        self.request = request


class PersistenceError(RatesError):
    pass


class NotificationDeliveryError(RatesError):
    def __init__(self, chat_id: int, message: str):
        super().__init__(f"Delivery to chat {chat_id} failed: {message}")
        self.chat_id = chat_id


class CacheError(RatesError):
    pass


class TelegramApiError(RatesError):
    pass
