# Overview: In-process publish/subscribe hub behind the live notification stream.

"""
Room-based broadcaster.

Each connected client is a Subscriber with its own bounded queue. On connect
a subscriber joins rooms derived from its role:

    admin       -> "admins", "office_boys"
    office_boy  -> "office_boys"
    employee    -> "user_<id>"

publish() is fire-and-forget: the event is put on every queue in the room
without waiting for the client. A subscriber whose queue is full is treated
as dead and dropped. Nothing is replayed to late joiners.

One hub is built by the application factory and stored on
app.extensions["notification_hub"]; services reach it via current_app.
"""

from __future__ import annotations

import itertools
import queue
import threading
from collections import defaultdict
from dataclasses import dataclass, field

from ..permissions import Role, parse_role

ADMINS_ROOM = "admins"
OFFICE_BOYS_ROOM = "office_boys"
NOTIFICATION_EVENT = "notification"

# Sentinel pushed to every queue on stop() so streams can exit
CLOSE = object()


def user_room(user_id: int) -> str:
    return f"user_{user_id}"


def rooms_for(role, user_id: int) -> set[str]:
    parsed = parse_role(role)
    if parsed is Role.ADMIN:
        return {ADMINS_ROOM, OFFICE_BOYS_ROOM}
    if parsed is Role.OFFICE_BOY:
        return {OFFICE_BOYS_ROOM}
    return {user_room(user_id)}


@dataclass(eq=False)
class Subscriber:
    id: int
    user_id: int
    role: str
    queue: queue.Queue
    rooms: set[str] = field(default_factory=set)

    def next_event(self, timeout: float | None = None):
        """
        Block for the next (event, payload) pair.

        Returns None on timeout and CLOSE once the hub stops or drops us.
        """
        try:
            return self.queue.get(timeout=timeout)
        except queue.Empty:
            return None


class NotificationHub:
    def __init__(self, queue_size: int = 100, logger=None):
        self.queue_size = queue_size
        self.logger = logger
        self._rooms: dict[str, set[Subscriber]] = defaultdict(set)
        self._subscribers: dict[int, Subscriber] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._running = False

    # -- lifecycle --

    def start(self) -> None:
        with self._lock:
            self._running = True

    def stop(self) -> None:
        """Disconnect every subscriber and refuse new ones until start()."""
        with self._lock:
            self._running = False
            subscribers = list(self._subscribers.values())
            self._subscribers.clear()
            self._rooms.clear()
        for sub in subscribers:
            self._close_queue(sub)

    @property
    def is_running(self) -> bool:
        return self._running

    # -- membership --

    def subscribe(self, user_id: int, role) -> Subscriber:
        if not self._running:
            raise RuntimeError("Notification hub is not running")

        sub = Subscriber(
            id=next(self._ids),
            user_id=user_id,
            role=str(role),
            queue=queue.Queue(maxsize=self.queue_size),
        )
        with self._lock:
            self._subscribers[sub.id] = sub
            for room in rooms_for(role, user_id):
                sub.rooms.add(room)
                self._rooms[room].add(sub)

        self._log("info", "Subscriber %s connected: user=%s role=%s rooms=%s",
                  sub.id, user_id, sub.role, sorted(sub.rooms))
        return sub

    def unsubscribe(self, sub: Subscriber) -> None:
        with self._lock:
            self._detach(sub)
        self._log("info", "Subscriber %s disconnected: user=%s", sub.id, sub.user_id)

    def _detach(self, sub: Subscriber) -> None:
        self._subscribers.pop(sub.id, None)
        for room in sub.rooms:
            members = self._rooms.get(room)
            if members is not None:
                members.discard(sub)
                if not members:
                    del self._rooms[room]

    # -- delivery --

    def send(self, sub: Subscriber, payload: dict, event: str = NOTIFICATION_EVENT) -> bool:
        try:
            sub.queue.put_nowait((event, payload))
            return True
        except queue.Full:
            return False

    def publish(self, room: str, payload: dict, event: str = NOTIFICATION_EVENT) -> int:
        """
        Push an event to every subscriber in room.

        Returns the number of subscribers the event was queued for.
        """
        with self._lock:
            members = list(self._rooms.get(room, ()))

        delivered = 0
        dead: list[Subscriber] = []
        for sub in members:
            if self.send(sub, payload, event):
                delivered += 1
            else:
                dead.append(sub)

        if dead:
            with self._lock:
                for sub in dead:
                    self._detach(sub)
            for sub in dead:
                self._close_queue(sub)
            self._log("warning", "Dropped %s stalled subscriber(s) from room %s", len(dead), room)

        self._log("debug", "Published %s to room %s (%s delivered)",
                  payload.get("type", event), room, delivered)
        return delivered

    # -- introspection --

    def room_members(self, room: str) -> list[Subscriber]:
        with self._lock:
            return list(self._rooms.get(room, ()))

    def connected_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def connected_count_by_role(self, role) -> int:
        wanted = str(role)
        with self._lock:
            return sum(1 for sub in self._subscribers.values() if sub.role == wanted)

    def stats(self) -> dict:
        return {
            "running": self._running,
            "connected": self.connected_count(),
            "byRole": {r.value: self.connected_count_by_role(r) for r in Role},
        }

    # -- helpers --

    @staticmethod
    def _close_queue(sub: Subscriber) -> None:
        # Make room for the sentinel if the queue is full
        while True:
            try:
                sub.queue.put_nowait(CLOSE)
                return
            except queue.Full:
                try:
                    sub.queue.get_nowait()
                except queue.Empty:
                    pass

    def _log(self, level: str, msg: str, *args) -> None:
        if self.logger is not None:
            getattr(self.logger, level)(msg, *args)
