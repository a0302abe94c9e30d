"""
Terminal chat against a running API.

    python -m client.cli --lat 40.7128 --lng -74.0060 --address "New York, NY" --persona food

Commands: ``:poi N`` shows the markers for POI N of the latest answer,
``:clear`` clears the history, ``:quit`` exits.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, TextIO

from agent.core.models import ChatRecord, Location
from client.api import ChatApiClient, ChatApiError
from client.map_layer import MarkerSet, show_selection
from client.renderer import PoiReference, activate_reference, render_chat


def format_markers(markers: MarkerSet) -> str:
    lines = []
    for marker in markers.markers:
        flag = "*" if markers.selected is marker else " "
        lines.append(
            f"{flag} [{marker.label}] {marker.title} ({marker.position.lat}, {marker.position.lng})"
        )
    return "\n".join(lines) or "(no markers)"


def handle_line(line: str, api: ChatApiClient, location: Location, persona: Optional[str], history: List[ChatRecord]) -> Optional[str]:
    """Process one input line and return the text to print, or ``None`` to stop."""
    line = line.strip()
    if not line:
        return ""
    if line == ":quit":
        return None
    if line == ":clear":
        removed = api.clear_chats()
        history.clear()
        return f"Cleared {removed} chats."
    if line.startswith(":poi"):
        if not history:
            return "No answers yet."
        try:
            number = int(line.split(maxsplit=1)[1])
        except (IndexError, ValueError):
            return "Usage: :poi N"
        selection = activate_reference(history, history[-1].id, number - 1)
        if selection is None:
            return f"No point of interest {number} in the latest answer."
        return format_markers(show_selection(selection))

    record = api.send_chat(line, location, persona=persona)
    history.append(record)
    rendered = render_chat(record)
    lines = []
    for segment in rendered.segments:
        if isinstance(segment, PoiReference):
            lines.append(f"[{segment.index + 1}] {segment.name}: {segment.description}")
        else:
            lines.append(segment.text)
    return "\n\n".join(lines)


def main(argv: Optional[List[str]] = None, stdin: TextIO = sys.stdin) -> int:
    parser = argparse.ArgumentParser(description="Ask questions about a location.")
    parser.add_argument("--lat", type=float, required=True)
    parser.add_argument("--lng", type=float, required=True)
    parser.add_argument("--address")
    parser.add_argument("--persona", help="Persona id, see GET /api/personas")
    parser.add_argument("--url", help="API base URL (default: CHAT_API_URL)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="[%(asctime)s] %(levelname)s - %(message)s")
    location = Location(lat=args.lat, lng=args.lng, address=args.address)
    history: List[ChatRecord] = []

    with ChatApiClient(base_url=args.url) as api:
        try:
            history.extend(api.list_chats())
        except ChatApiError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        print(f"Asking about {location.label()}. Type :quit to exit.")
        for line in stdin:
            try:
                output = handle_line(line, api, location, args.persona, history)
            except ChatApiError as exc:
                print(f"Error: {exc}", file=sys.stderr)
                continue
            if output is None:
                break
            if output:
                print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
