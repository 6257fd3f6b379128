"""Trello resources as dataclasses, with the requests that act on them.

Every model is built from Trello's camelCase JSON with ``from_dict()``.
Models returned by a ``TrelloClient`` remember that client, so their methods
(``board.get_cards()``, ``card.archive()``, ...) can issue further requests.
A model built by hand must be given a client with ``set_client()`` first.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from pytrello.arguments import Arguments, flatten_arguments
from pytrello.custom_fields import CustomField, CustomFieldItem
from pytrello.exceptions import TrelloAPIError, is_not_found, is_permission_denied

if TYPE_CHECKING:
    from pytrello.client import TrelloClient

logger = logging.getLogger(__name__)

# Action types that leave a new card behind
CARD_CREATING_ACTIONS = {
    "createCard",
    "emailCard",
    "copyCard",
    "convertToCardFromCheckItem",
    "moveCardToBoard",
}


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse Trello's ISO 8601 timestamps ("2016-10-05T15:26:52.812Z")"""
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def format_rfc3339(value: datetime) -> str:
    """Format a timestamp for a query argument; naive values are local time"""
    return value.astimezone().isoformat(timespec="seconds")


def format_pos(pos: float) -> str:
    """Render a position the shortest way ("8192", not "8192.0")"""
    if float(pos).is_integer():
        return str(int(pos))
    return repr(float(pos))


class _Resource:
    """Mixin giving models access to the client that fetched them"""

    _client: TrelloClient | None

    def set_client(self, client: TrelloClient) -> None:
        self._client = client

    @property
    def client(self) -> TrelloClient:
        if self._client is None:
            raise ValueError(
                f"{type(self).__name__} has no client. "
                "Fetch it through TrelloClient or call set_client() first."
            )
        return self._client

    def _refresh_from(self, other: Any) -> None:
        """Copy every field from a freshly decoded instance of the same model"""
        for f in dataclasses.fields(self):  # type: ignore[arg-type]
            if f.name != "_client":
                setattr(self, f.name, getattr(other, f.name))


@dataclass
class Label:
    id: str
    name: str = ""
    color: str = ""
    id_board: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Label:
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            color=data.get("color") or "",
            id_board=data.get("idBoard") or "",
        )


@dataclass
class Member:
    id: str
    username: str = ""
    full_name: str = ""
    initials: str = ""
    avatar_hash: str = ""
    email: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Member:
        return cls(
            id=data["id"],
            username=data.get("username") or "",
            full_name=data.get("fullName") or "",
            initials=data.get("initials") or "",
            avatar_hash=data.get("avatarHash") or "",
            email=data.get("email") or "",
        )


@dataclass
class Attachment:
    """A file or link attached to a card"""

    id: str = ""
    name: str = ""
    url: str = ""
    mime_type: str = ""
    bytes: int = 0
    date: datetime | None = None
    id_member: str = ""
    is_upload: bool = False
    pos: float = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Attachment:
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            url=data.get("url") or "",
            mime_type=data.get("mimeType") or "",
            bytes=data.get("bytes") or 0,
            date=parse_timestamp(data.get("date")),
            id_member=data.get("idMember") or "",
            is_upload=bool(data.get("isUpload")),
            pos=data.get("pos") or 0,
        )


@dataclass
class CheckItem:
    id: str
    name: str = ""
    state: str = ""
    id_checklist: str = ""
    pos: float = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CheckItem:
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            state=data.get("state") or "",
            id_checklist=data.get("idChecklist") or "",
            pos=data.get("pos") or 0,
        )

    @property
    def complete(self) -> bool:
        return self.state == "complete"


@dataclass
class CheckItemState:
    """How a CheckItem appears in a card's ``checkItemStates``"""

    id_check_item: str
    state: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CheckItemState:
        return cls(id_check_item=data["idCheckItem"], state=data.get("state") or "")


@dataclass
class Checklist:
    """A checklist on a card; a card has zero or more of them.

    https://developers.trello.com/reference/#checklist-object
    """

    id: str
    name: str = ""
    id_board: str = ""
    id_card: str = ""
    pos: float = 0
    check_items: list[CheckItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Checklist:
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            id_board=data.get("idBoard") or "",
            id_card=data.get("idCard") or "",
            pos=data.get("pos") or 0,
            check_items=[CheckItem.from_dict(i) for i in data.get("checkItems") or []],
        )


@dataclass
class Action:
    """An entry of a board or card activity log"""

    id: str
    type: str = ""
    date: datetime | None = None
    id_member_creator: str = ""
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Action:
        return cls(
            id=data["id"],
            type=data.get("type") or "",
            date=parse_timestamp(data.get("date")),
            id_member_creator=data.get("idMemberCreator") or "",
            data=dict(data.get("data") or {}),
        )

    def did_create_card(self) -> bool:
        return self.type in CARD_CREATING_ACTIONS

    @property
    def card_source_id(self) -> str | None:
        """ID of the card this action copied from, if any"""
        source = self.data.get("cardSource") or {}
        return source.get("id")


def first_card_create_action(actions: Iterable[Action]) -> Action | None:
    for action in actions:
        if action.did_create_card():
            return action
    return None


@dataclass
class Board(_Resource):
    id: str
    name: str = ""
    desc: str = ""
    closed: bool = False
    url: str = ""
    short_url: str = ""
    id_organization: str = ""
    _client: TrelloClient | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], client: TrelloClient | None = None) -> Board:
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            desc=data.get("desc") or "",
            closed=bool(data.get("closed")),
            url=data.get("url") or "",
            short_url=data.get("shortUrl") or "",
            id_organization=data.get("idOrganization") or "",
            _client=client,
        )

    def get_cards(self, args: Mapping[str, Any] | None = None) -> list[Card]:
        """All cards on the board (follows pagination past 1000 cards)"""
        data = self.client.paginated_get(f"boards/{self.id}/cards", args)
        return [Card.from_dict(c, self._client) for c in data]

    def get_lists(self, args: Mapping[str, Any] | None = None) -> list[List]:
        data = self.client.get(f"boards/{self.id}/lists", args)
        return [List.from_dict(entry, self._client) for entry in data]

    def get_custom_fields(self, args: Mapping[str, Any] | None = None) -> list[CustomField]:
        data = self.client.get(f"boards/{self.id}/customFields", args)
        return [CustomField.from_dict(cf) for cf in data]

    def get_actions(self, args: Mapping[str, Any] | None = None) -> list[Action]:
        data = self.client.paginated_get(f"boards/{self.id}/actions", args)
        return [Action.from_dict(a) for a in data]

    def contains_copy_of_card(self, card_id: str, args: Mapping[str, Any] | None = None) -> bool:
        """True if any card on this board was copied from ``card_id``"""
        actions = self.get_actions(flatten_arguments([{"filter": "copyCard"}, args]))
        return any(action.card_source_id == card_id for action in actions)


@dataclass
class List(_Resource):
    id: str
    name: str = ""
    id_board: str = ""
    closed: bool = False
    pos: float = 0
    _client: TrelloClient | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], client: TrelloClient | None = None) -> List:
        return cls(
            id=data["id"],
            name=data.get("name") or "",
            id_board=data.get("idBoard") or "",
            closed=bool(data.get("closed")),
            pos=data.get("pos") or 0,
            _client=client,
        )

    def get_cards(self, args: Mapping[str, Any] | None = None) -> list[Card]:
        data = self.client.paginated_get(f"lists/{self.id}/cards", args)
        return [Card.from_dict(c, self._client) for c in data]

    def add_card(self, card: Card, args: Mapping[str, Any] | None = None) -> Card:
        """Create ``card`` in this list; ``card`` is updated from Trello's response"""
        params = card.creation_arguments()
        params.pop("idList", None)
        data = self.client.post(f"lists/{self.id}/cards", flatten_arguments([params, args]))
        card._refresh_from(Card.from_dict(data))
        card.set_client(self.client)
        return card


@dataclass
class Card(_Resource):
    """A Trello card.

    ``custom_field_items`` is only populated when the card was requested with
    ``customFieldItems=true``; likewise for attachments, checklists, members
    and actions.
    """

    id: str = ""
    name: str = ""
    desc: str = ""
    closed: bool = False
    pos: float = 0
    id_short: int = 0
    short_link: str = ""
    short_url: str = ""
    url: str = ""
    id_board: str = ""
    id_list: str = ""
    id_labels: list[str] = field(default_factory=list)
    id_members: list[str] = field(default_factory=list)
    id_checklists: list[str] = field(default_factory=list)
    due: datetime | None = None
    due_complete: bool = False
    start: datetime | None = None
    date_last_activity: datetime | None = None
    labels: list[Label] = field(default_factory=list)
    members: list[Member] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)
    checklists: list[Checklist] = field(default_factory=list)
    check_item_states: list[CheckItemState] = field(default_factory=list)
    custom_field_items: list[CustomFieldItem] = field(default_factory=list)
    actions: list[Action] = field(default_factory=list)
    _client: TrelloClient | None = field(default=None, repr=False, compare=False)
    _custom_field_map: dict[str, Any] | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], client: TrelloClient | None = None) -> Card:
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            desc=data.get("desc") or "",
            closed=bool(data.get("closed")),
            pos=data.get("pos") or 0,
            id_short=data.get("idShort") or 0,
            short_link=data.get("shortLink") or "",
            short_url=data.get("shortUrl") or "",
            url=data.get("url") or "",
            id_board=data.get("idBoard") or "",
            id_list=data.get("idList") or "",
            id_labels=list(data.get("idLabels") or []),
            id_members=list(data.get("idMembers") or []),
            id_checklists=list(data.get("idChecklists") or []),
            due=parse_timestamp(data.get("due")),
            due_complete=bool(data.get("dueComplete")),
            start=parse_timestamp(data.get("start")),
            date_last_activity=parse_timestamp(data.get("dateLastActivity")),
            labels=[Label.from_dict(lb) for lb in data.get("labels") or []],
            members=[Member.from_dict(m) for m in data.get("members") or []],
            attachments=[Attachment.from_dict(a) for a in data.get("attachments") or []],
            checklists=[Checklist.from_dict(c) for c in data.get("checklists") or []],
            check_item_states=[
                CheckItemState.from_dict(s) for s in data.get("checkItemStates") or []
            ],
            custom_field_items=[
                CustomFieldItem.from_dict(i) for i in data.get("customFieldItems") or []
            ],
            actions=[Action.from_dict(a) for a in data.get("actions") or []],
            _client=client,
        )

    def created_at(self) -> datetime | None:
        """Creation time, encoded in the first 8 hex digits of the card ID"""
        try:
            timestamp = int(self.id[:8], 16)
        except ValueError:
            return None
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)

    def creation_arguments(self) -> Arguments:
        """Query arguments describing this card for a create request"""
        args = Arguments(
            name=self.name,
            desc=self.desc,
            pos=format_pos(self.pos),
            idList=self.id_list,
            idMembers=",".join(self.id_members),
            idLabels=",".join(self.id_labels),
        )
        if self.due is not None:
            args["due"] = format_rfc3339(self.due)
        if self.start is not None:
            args["start"] = format_rfc3339(self.start)
        return args

    def custom_fields(self, board_custom_fields: Iterable[CustomField]) -> dict[str, Any]:
        """Map custom field names to this card's values.

        Dropdown fields carry no value of their own, only the ID of the chosen
        option; those are resolved to the option text through
        ``board_custom_fields``. The result is computed once and cached.
        """
        if self._custom_field_map is not None:
            return self._custom_field_map

        fields_by_id = {cf.id: cf for cf in board_custom_fields}
        result: dict[str, Any] = {}
        for item in self.custom_field_items:
            custom_field = fields_by_id.get(item.id_custom_field)
            if custom_field is None:
                continue
            if item.value.is_set:
                result[custom_field.name] = item.value.get()
                continue
            option_text = custom_field.option_text(item.id_value)
            if option_text is not None:
                result[custom_field.name] = option_text

        self._custom_field_map = result
        return result

    def _update(self, params: Mapping[str, Any]) -> None:
        data = self.client.put(f"cards/{self.id}", Arguments(params))
        self._refresh_from(Card.from_dict(data))

    def archive(self) -> None:
        self._update({"closed": "true"})

    def unarchive(self) -> None:
        self._update({"closed": "false"})

    def copy_to_list(self, list_id: str, args: Mapping[str, Any] | None = None) -> Card:
        """Copy this card, with everything on it, into another list"""
        params = {"idList": list_id, "idCardSource": self.id, "keepFromSource": "all"}
        data = self.client.post("cards", flatten_arguments([params, args]))
        return Card.from_dict(data, self._client)

    def get_actions(self, args: Mapping[str, Any] | None = None) -> list[Action]:
        data = self.client.paginated_get(f"cards/{self.id}/actions", args)
        return [Action.from_dict(a) for a in data]

    def get_checklists(self, args: Mapping[str, Any] | None = None) -> list[Checklist]:
        data = self.client.get(f"cards/{self.id}/checklists", args)
        return [Checklist.from_dict(c) for c in data]

    def get_parent_card(self, args: Mapping[str, Any] | None = None) -> Card | None:
        """The card this one was copied from, or None if it was created fresh"""
        action = first_card_create_action(self.actions)
        if action is None:
            # Not preloaded with actions; ask for the copy action explicitly
            logger.debug("Fetching copyCard actions for card %s", self.id)
            action = first_card_create_action(self.get_actions({"filter": "copyCard"}))

        if action is not None and action.card_source_id:
            return self.client.get_card(action.card_source_id, args)
        return None

    def get_ancestor_cards(self, args: Mapping[str, Any] | None = None) -> list[Card]:
        """Follow the chain of parent cards back to the original.

        Stops quietly when a parent was deleted or is on a board the token
        cannot read.
        """
        ancestors: list[Card] = []
        seen = {self.id}
        card: Card = self
        while True:
            try:
                parent = card.get_parent_card(args)
            except TrelloAPIError as e:
                if is_not_found(e) or is_permission_denied(e):
                    return ancestors
                raise
            if parent is None or parent.id in seen:
                return ancestors
            ancestors.append(parent)
            seen.add(parent.id)
            card = parent

    def add_member_id(self, member_id: str) -> list[Member]:
        """Assign a member to this card; returns the card's members afterwards"""
        data = self.client.post(f"cards/{self.id}/idMembers", Arguments(value=member_id))
        return [Member.from_dict(m) for m in data]

    def add_url_attachment(self, attachment: Attachment) -> Attachment:
        """Attach a link; ``attachment`` is updated from Trello's response"""
        data = self.client.post(
            f"cards/{self.id}/attachments", Arguments(url=attachment.url, name=attachment.name)
        )
        created = Attachment.from_dict(data)
        for f in dataclasses.fields(created):
            setattr(attachment, f.name, getattr(created, f.name))
        return attachment
