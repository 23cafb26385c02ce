from enum import StrEnum


class EventType(StrEnum):
    FUN = 'fun'
    SPORTS = 'sports'
    EDUCATIONAL = 'educational'
    OTHER = 'other'
