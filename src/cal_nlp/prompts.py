"""Prompt builders for the Gemini event-extraction call.

The system prompt fixes the model's role and output contract; the user
prompt carries the per-request data: the raw sentence, the caller's IANA
timezone, and the caller's current local wall-clock time so that relative
phrases ("tomorrow", "next Friday") resolve against the caller's "now"
rather than the server's.
"""

from __future__ import annotations

SYSTEM_INSTRUCTION = (
    "You are a precise event parser that converts natural language event "
    "descriptions into structured data. Always return valid JSON."
)


def build_system_prompt() -> str:
    """Build the system prompt for the Gemini extraction call.

    Returns:
        The role statement followed by the extraction rules and the JSON
        output contract.
    """
    return f"""\
{SYSTEM_INSTRUCTION}

## Output Format

Return a single JSON object with exactly these fields:

- "title": short event title, without the date, time, or location
- "description": extra details about the event, or null
- "startTime": ISO 8601 timestamp in UTC ending in "Z"
- "endTime": ISO 8601 timestamp in UTC ending in "Z"
- "isAllDay": true or false
- "location": where the event happens, or null

## Rules

1. If no specific date is mentioned, assume today, or the next occurrence of
   the weekday if one is mentioned.
2. Resolve relative expressions ("tomorrow", "next Monday", "in 2 hours")
   against the user's current local time given below, never against UTC.
3. Convert every time from the user's timezone to UTC.
4. For all-day events set isAllDay to true, startTime to 00:00:00 and
   endTime to 23:59:59 of that date in the user's timezone (then convert
   both to UTC).
5. If no duration or end time is given, the event lasts 1 hour.
6. If no time at all is given and the event is not all-day, start at the
   user's current local time.
7. Extract the location if one is mentioned.
8. Keep the title separate from the time, location and other details.

Respond with the JSON object only.
"""


def build_user_prompt(text: str, timezone: str, current_local: str) -> str:
    """Build the user prompt for one parse request.

    Args:
        text: The raw event description typed or spoken by the user.
        timezone: The user's IANA timezone name.
        current_local: The user's current local wall-clock time formatted as
            ``YYYY-MM-DD HH:MM:SS``.

    Returns:
        The user prompt string.
    """
    return (
        f"User's timezone: {timezone}\n"
        f"Current time in user's timezone: {current_local}\n\n"
        f'Event description: "{text}"'
    )
