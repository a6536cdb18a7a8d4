import os
import sys
import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.markdown import Markdown
from rich.prompt import Prompt
from rich.text import Text
from rich.theme import Theme

from minimud.config import load_config, load_env
from minimud.content import load_world
from minimud.errors import GameError
from minimud.game import Game, is_known_verb, tokenize
from minimud.listener import Listener, build_context

# 1. SETUP THEME
custom_theme = Theme({
    "info": "bold #b0d8e3",       # Pale Cyan
    "text": "default",
    "dim": "dim",
    "warning": "bold #ffafaf",    # Soft red
    "success": "bold #a3be8c",    # Soft green
})

console = Console(theme=custom_theme)


def setup_logging(debug=False):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def build_game(config):
    world, manifest = load_world(config['world'])
    game = Game(
        world,
        start_room=manifest['start_room'],
        player_name=manifest.get('player_name', 'Hero'),
        save_path=config['save_file'],
    )
    return game, manifest


def build_listener(config):
    if not config.get('listener_enabled'):
        return None
    if not os.getenv("OPENAI_API_KEY"):
        console.print("[warning]WARNING:[/] listener_enabled is set but no OPENAI_API_KEY was found.")
        return None
    return Listener(model_name=config.get('listener_model', 'gpt-5-nano'))


def handle_line(game, line, listener=None):
    """
    Runs one line of player input.
    Returns (output, interpreted) where `interpreted` is the command the
    listener substituted for an unknown verb, or None.
    """
    verb, arg = tokenize(line)
    if verb is None:
        return "", None

    interpreted = None
    if listener and not is_known_verb(verb):
        mapped = listener.map_command(line, build_context(game), game.io.get_history_str())
        if mapped:
            mapped_verb, mapped_arg = tokenize(mapped)
            if is_known_verb(mapped_verb):
                interpreted = mapped
                verb, arg = mapped_verb, mapped_arg

    return game.execute(verb, arg), interpreted


def show_welcome(manifest):
    title = manifest.get('title', 'Untitled')
    author = manifest.get('author', 'Anonymous')
    welcome_md = Markdown(f"""
# {title}

Una aventura de *{author}*.

> Bienvenido al mini-MUD (offline). Escribe 'help' para ver comandos.
""")
    console.print(Panel(welcome_md, border_style="info", padding=(1, 2), width=60))


# ============================================
# GAME LOOP
# ============================================
def run(game, listener=None):
    console.print(Text(game.execute('look')))

    while game.running:
        try:
            line = Prompt.ask("\n[info]>[/info]", console=console)
        except (EOFError, KeyboardInterrupt):
            console.print("\nSaliendo…")
            break

        if listener:
            with console.status("[dim]Interpretando...[/dim]"):
                output, interpreted = handle_line(game, line, listener)
        else:
            output, interpreted = handle_line(game, line)

        if interpreted:
            console.print(Text(f"[Interpretado: {interpreted}]", style="dim"))
        if output:
            console.print(Text(output))


# ============================================
# MAIN
# ============================================
def main():
    load_env()
    try:
        config = load_config()
    except GameError as e:
        console.print(Panel(f"[warning]CONFIG ERROR:[/]\n{e.message}", border_style="warning"))
        sys.exit(1)

    setup_logging(config.get('debug_mode', False))

    try:
        game, manifest = build_game(config)
    except GameError as e:
        console.print(Panel(f"[warning]WORLD LOAD ERROR:[/]\n{e.message}", border_style="warning"))
        sys.exit(1)

    show_welcome(manifest)
    run(game, build_listener(config))


if __name__ == "__main__":
    main()
