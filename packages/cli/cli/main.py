"""Interactive command-line interface for the voice assistant."""

import asyncio
import logging
import os

from dotenv import load_dotenv  # type: ignore

from chatbot.ConversationController import ConversationController  # type: ignore
from chatbot.errors import ConversationBusyError  # type: ignore
from chatbot.models import Role  # type: ignore
from chatbot.ProxyClient import ProxyClient  # type: ignore
from cli.audio import load_clip

DEFAULT_RECORD_SECONDS = 5.0

HELP_TEXT = """\
Commands:
  <text>            send a typed message
  /audio PATH       transcribe an audio file and send it
  /record [SECS]    record from the microphone (default 5 seconds)
  /retry            ask again for the last unanswered message
  /reset            start over with an empty conversation
  /history          show the whole conversation
  /help             show this help
  quit | exit       leave"""

_SPEAKERS = {Role.USER: "You", Role.ASSISTANT: "Assistant", Role.SYSTEM: "System"}


class ConsoleRenderer:
    """Print conversation changes as the controller reports them."""

    def __init__(self, echo_user: bool = False) -> None:
        self._shown = 0
        self._error: str | None = None
        self._loading = False
        self.echo_user = echo_user

    def __call__(self, controller: ConversationController) -> None:
        messages = controller.messages
        if len(messages) < self._shown:
            print("\nConversation cleared.")
            self._shown = 0

        for message in messages[self._shown:]:
            if message.role is not Role.USER or self.echo_user:
                print(f"\n{_SPEAKERS[message.role]}: {message.content}")
        self._shown = len(messages)

        if controller.loading and not self._loading:
            print("\nThinking...")
        self._loading = controller.loading

        if controller.error and controller.error != self._error:
            print(f"\nError: {controller.error}")
        self._error = controller.error

    def print_history(self, controller: ConversationController) -> None:
        if not controller.messages:
            print("\n(no messages yet)")
        for message in controller.messages:
            print(f"\n{_SPEAKERS[message.role]}: {message.content}")


async def handle_command(
    controller: ConversationController,
    renderer: ConsoleRenderer,
    line: str,
) -> bool:
    """Run one line of user input.

    Returns:
        False when the user asked to leave, True otherwise.
    """
    command, _, argument = line.partition(" ")
    argument = argument.strip()

    if line.lower() in ("quit", "exit"):
        return False

    try:
        if command == "/help":
            print(HELP_TEXT)
        elif command == "/reset":
            controller.reset()
        elif command == "/history":
            renderer.print_history(controller)
        elif command == "/retry":
            await controller.retry_last_turn()
        elif command == "/audio":
            if not argument:
                print("Usage: /audio PATH")
                return True
            clip, filename = load_clip(argument)
            renderer.echo_user = True
            await controller.submit_audio(clip, filename)
        elif command == "/record":
            seconds = float(argument) if argument else DEFAULT_RECORD_SECONDS
            clip = await _record(seconds)
            if clip is not None:
                renderer.echo_user = True
                await controller.submit_audio(clip)
        elif command.startswith("/"):
            print(f"Unknown command: {command} (try /help)")
        else:
            renderer.echo_user = False
            await controller.submit_text(line)
    except ConversationBusyError as e:
        print(f"\n{e}")
    except (OSError, ValueError) as e:
        print(f"\nError: {e}")

    return True


async def _record(seconds: float) -> bytes | None:
    try:
        from cli.recorder import record_clip
    except (ImportError, OSError) as e:
        print(f"\nMicrophone recording is unavailable: {e}")
        return None

    print(f"\nRecording for {seconds:g} seconds...")
    return await asyncio.to_thread(record_clip, seconds)


async def run() -> None:
    """Run the interactive REPL until the user leaves."""
    timeout = float(os.environ.get("REQUEST_TIMEOUT_SECONDS", "60"))

    async with ProxyClient() as client:
        controller = ConversationController(client, timeout=timeout)
        renderer = ConsoleRenderer()
        controller.add_listener(renderer)

        print("Voice Assistant (type /help for commands, 'quit' to stop)")
        print("-" * 56)

        while True:
            try:
                user_input = (await asyncio.to_thread(input, "\nYou: ")).strip()
            except (KeyboardInterrupt, EOFError):
                print("\nGoodbye!")
                break

            if not user_input:
                continue
            if not await handle_command(controller, renderer, user_input):
                print("Goodbye!")
                break


def main():
    """Load configuration and start the REPL."""
    load_dotenv()
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(run())


if __name__ == "__main__":
    main()
