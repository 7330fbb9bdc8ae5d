from pydantic import BaseModel, Field

THUMBS_UP = 1
VALID_REACT_IDS = {THUMBS_UP}


class Reaction(BaseModel):
    react_id: int
    u_ids: list[int] = []

    def has_user(self, u_id: int) -> bool:
        return u_id in self.u_ids


def _default_reacts() -> list[Reaction]:
    return [Reaction(react_id=THUMBS_UP)]


class Message(BaseModel):
    message_id: int
    u_id: int
    message: str
    time_sent: int
    reacts: list[Reaction] = Field(default_factory=_default_reacts)
    is_pinned: bool = False

    def reaction(self, react_id: int) -> Reaction:
        for react in self.reacts:
            if react.react_id == react_id:
                return react
        react = Reaction(react_id=react_id)
        self.reacts.append(react)
        return react

    def to_dict(self, viewer_id: int) -> dict:
        return {
            "message_id": self.message_id,
            "u_id": self.u_id,
            "message": self.message,
            "time_sent": self.time_sent,
            "reacts": [
                {
                    "react_id": r.react_id,
                    "u_ids": list(r.u_ids),
                    "is_this_user_reacted": viewer_id in r.u_ids,
                }
                for r in self.reacts
            ],
            "is_pinned": self.is_pinned,
        }
