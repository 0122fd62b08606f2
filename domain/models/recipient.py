from dataclasses import dataclass


@dataclass(frozen=True)
class Recipient:
    chat_id: int
    username: str
