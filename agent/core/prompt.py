from __future__ import annotations

from langchain_core.prompts import ChatPromptTemplate


SYSTEM_PROMPT = (
    "{persona}\n\n"
    "The user is looking at {location}.\n"
    "{places_section}\n\n"
    "Provide relevant information about this location based on the user's query. "
    "Respond with a single JSON object and nothing else, using these fields:\n"
    "- description: a detailed answer to the user's query about the location\n"
    "- points_of_interest: a list of notable places, each as "
    '{{"name": string, "description": string, "coordinates": {{"lat": number, "lng": number}}}}\n'
    "- fun_fact: an interesting fact about the area (if available)"
)

PLACES_RULES = (
    "Nearby places:\n{listing}\n"
    "Only use places from this list for points_of_interest and copy their "
    "coordinates exactly as given."
)

NO_PLACES = "No nearby places were provided; leave points_of_interest empty unless you are certain of exact coordinates."


def build_prompt() -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages(
        [
            ("system", SYSTEM_PROMPT),
            ("human", "{input}"),
        ]
    )
