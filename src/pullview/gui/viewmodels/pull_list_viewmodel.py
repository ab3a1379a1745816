"""Pure Python PullListViewModel (MVVM), no Qt dependency.

Owns the list store and both pull controllers, binds sources on mount,
rebinds when the scroll source factory changes and resets on unmount.  The
rendering surface reads ``render_props()`` or binds to the observable
properties; ``PullListModel`` adapts it to Qt item views.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from pullview.application.services.list_store import (
    ListChange,
    ListSnapshot,
    ListStore,
)
from pullview.application.services.prefix_controller import PrefixPullController
from pullview.application.services.scroll_controller import (
    KeyExtractor,
    ScrollPullController,
)
from pullview.errors.handler import ErrorHandler
from pullview.events.bus import EventBus
from pullview.events.list_events import (
    ListChangedEvent,
    SourceBoundEvent,
    StreamExhaustedEvent,
)
from pullview.gui.viewmodels.base import BaseViewModel
from pullview.gui.viewmodels.signal import ObservableProperty, Signal
from pullview.settings.options import PullListOptions
from pullview.streams.source import SourceFactory

_EVENT_SOURCE = "pull_list"


class PullListViewModel(BaseViewModel):
    """Pull list ViewModel: pure Python, no Qt dependency.

    Presentation options the view model does not interpret (item renderer,
    separators, header, column count, ...) are passed through
    ``render_props()`` untouched.  ``list_footer`` is the one exception: it is
    only forwarded while more items may arrive.
    """

    def __init__(
        self,
        key: KeyExtractor,
        *,
        scroll_source_factory: Optional[SourceFactory] = None,
        prefix_source_factory: Optional[SourceFactory] = None,
        options: Union[PullListOptions, Mapping[str, Any], None] = None,
        event_bus: Optional[EventBus] = None,
        presentation: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__()
        self._logger = logging.getLogger(__name__)
        if not isinstance(options, PullListOptions):
            options = PullListOptions.from_mapping(options)
        self._options = options
        self._event_bus = event_bus or EventBus()
        self._presentation = dict(presentation or {})
        self._key = key
        self._scroll_factory = scroll_source_factory
        self._prefix_factory = prefix_source_factory
        self._mounted = False

        error_handler = ErrorHandler(self._logger, self._event_bus)
        self.store = ListStore()
        self._scroll = ScrollPullController(
            self.store,
            key,
            initial_amount=options.initial_amount,
            pull_amount=options.pull_amount,
            error_handler=error_handler,
        )
        self._prefix = PrefixPullController(self.store, error_handler=error_handler)

        # Observable properties
        snapshot = self.store.snapshot
        self.items = ObservableProperty(snapshot.items)
        self.more_available = ObservableProperty(snapshot.more_available)
        self.change_token = ObservableProperty(snapshot.change_token)

        # Signals
        self.list_changed = Signal()  # emits (snapshot, change)

        self.connect_signal(self.store.changed, self._on_store_changed)

    # -- properties --------------------------------------------------------

    @property
    def options(self) -> PullListOptions:
        return self._options

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def key(self) -> KeyExtractor:
        return self._key

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def is_pulling(self) -> bool:
        return self._scroll.is_pulling

    @property
    def snapshot(self) -> ListSnapshot:
        return self.store.snapshot

    # -- lifecycle ---------------------------------------------------------

    def mount(self) -> None:
        """Bind both sources and pull the first batch."""
        if self._mounted:
            return
        self._mounted = True
        if self._scroll_factory is not None:
            self._start_scroll(self._scroll_factory)
        if self._prefix_factory is not None:
            self._prefix.start(self._prefix_factory())
            self._event_bus.publish(SourceBoundEvent(source=_EVENT_SOURCE, stream="prefix"))

    def set_scroll_source_factory(self, factory: Optional[SourceFactory]) -> None:
        """Swap the scroll source factory; a new factory is bound right away."""
        if factory is self._scroll_factory:
            return
        self._scroll_factory = factory
        if self._mounted and factory is not None:
            self._start_scroll(factory)

    def unmount(self) -> None:
        """Terminate both sources and reset the list."""
        if not self._mounted:
            return
        self._mounted = False
        self._scroll.stop()
        self._prefix.stop()

    def dispose(self) -> None:
        self.unmount()
        super().dispose()

    # -- rendering surface -------------------------------------------------

    def on_end_reached(self, info: Any = None) -> None:
        self._scroll.on_end_reached(info)

    def footer_visible(self) -> bool:
        return bool(self.more_available.value)

    def render_props(self, **presentation: Any) -> dict[str, Any]:
        """Return the props handed to the rendering surface for this state."""
        props: dict[str, Any] = {"on_end_reached_threshold": self._options.end_threshold}
        props.update(self._presentation)
        props.update(presentation)
        snapshot = self.store.snapshot
        footer = props.get("list_footer")
        props.update(
            {
                "data": snapshot.items,
                "extra_data": snapshot.change_token,
                "on_end_reached": self.on_end_reached,
                "list_footer": footer if snapshot.more_available else None,
            }
        )
        return props

    # -- internal ----------------------------------------------------------

    def _start_scroll(self, factory: SourceFactory) -> None:
        self._scroll.start(factory())
        self._event_bus.publish(SourceBoundEvent(source=_EVENT_SOURCE, stream="scroll"))

    def _on_store_changed(self, snapshot: ListSnapshot, change: ListChange) -> None:
        was_expecting = self.more_available.value
        self.items.value = snapshot.items
        self.more_available.value = snapshot.more_available
        self.change_token.value = snapshot.change_token
        self.list_changed.emit(snapshot, change)
        self._event_bus.publish(
            ListChangedEvent(
                source=_EVENT_SOURCE,
                kind=change.kind.value,
                start=change.start,
                count=change.count,
                change_token=snapshot.change_token,
            )
        )
        if was_expecting and not snapshot.more_available:
            self._logger.info("Scroll source exhausted after %d items", len(snapshot.items))
            self._event_bus.publish(
                StreamExhaustedEvent(source=_EVENT_SOURCE, item_count=len(snapshot.items))
            )
