import os
import json
import logging

from openai import OpenAI, OpenAIError

from minimud.world import DARK

logger = logging.getLogger(__name__)

COMMAND_FORMS = [
    "look",
    "go [direction]",
    "take [item]",
    "drop [item]",
    "use [item]",
    "inventory",
    "save",
    "load",
    "help",
    "quit",
]

SYSTEM_PROMPT = """
ROLE: You translate a player's free-form text into one command of a text adventure.
RULES:
1. Output VALID JSON ONLY, with exactly one key: "command".
2. "command" must follow one of the allowed forms, using item keys or names and exit directions from the context.
3. If nothing fits, return {"command": null}.
"""


def build_context(game):
    """What the player can currently perceive; items in a dark room stay hidden."""
    room = game.current_room()
    lines = [f"Exits: {', '.join(room.exits) or 'none'}"]
    if not room.has_flag(DARK) or game.has_light():
        lines.insert(0, f"Location: {room.name}")
        visible = [f"{k} ({game.world.items[k].name})" for k in room.items if k in game.world.items]
        lines.append(f"Visible: {', '.join(visible) or 'nothing'}")
    carried = [f"{k} ({game.world.items[k].name})" for k in game.player.inventory if k in game.world.items]
    lines.append(f"Carrying: {', '.join(carried) or 'nothing'}")
    return "\n".join(lines)


class Listener:
    def __init__(self, model_name="gpt-5-nano", client=None):
        self.client = client or OpenAI(api_key=os.getenv("OPENAI_API_KEY"))
        self.model = model_name

    def map_command(self, user_input, context, history=""):
        """
        Maps free text onto one of COMMAND_FORMS.
        Returns the command line, or None when the model has no answer.
        """
        forms = "\n".join(f"- {form}" for form in COMMAND_FORMS)
        user_msg = (
            f"User Input: {user_input}\n\n"
            f"Allowed forms:\n{forms}\n\n"
            f"Current Location Context:\n{context}\n\n"
            f"Recent History:\n{history}\n"
        )

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": user_msg}
                ],
                response_format={"type": "json_object"},
            )
            content = json.loads(response.choices[0].message.content)
        except (OpenAIError, ValueError, LookupError, AttributeError, TypeError) as e:
            logger.warning("Listener failed to map %r: %s", user_input, e)
            return None

        command = content.get("command") if isinstance(content, dict) else None
        if not isinstance(command, str) or not command.strip():
            return None
        return command.strip()
