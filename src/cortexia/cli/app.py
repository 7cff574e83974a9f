"""Main CLI application using Typer."""
import asyncio
import logging

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.table import Table

from ..chat import ChatHistory, ChatSession, ContextAction, Message, PromptLibrary
from ..providers import HTTPTransport
from ..roles import Role
from ..settings import ChatSettings, CompatibleProvider
from .providers import (
    get_configuration,
    get_orchestrator,
    get_prompt_store,
    get_settings,
    get_store,
)

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="cortexia",
    help="Chat with OpenAI-compatible providers from the terminal",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

SENDER_STYLES = {
    Role.USER: "bold yellow",
    Role.ASSISTANT: "bold green",
    Role.SYSTEM: "bold red",
}


@app.callback()
def configure_logging(
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
):
    """Install a rich log handler at the requested level."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


def _print_message(message: Message, settings: ChatSettings, number: int | None = None) -> None:
    label = message.sender.value.capitalize()
    prefix = f"[dim]{number}.[/dim] " if number is not None else ""
    console.print(f"{prefix}[{SENDER_STYLES[message.sender]}]{label}:[/{SENDER_STYLES[message.sender]}]")
    if settings.word_wrap:
        console.print(Markdown(message.content))
    else:
        console.print(message.content, soft_wrap=True, markup=False)
    console.print()


def _print_conversation(session: ChatSession) -> None:
    for number, message in enumerate(session.messages, 1):
        _print_message(message, session.settings, number)


def _print_prompts(library: PromptLibrary) -> None:
    if not library.prompts:
        console.print("[dim]No saved prompts.[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Prompt")
    table.add_column("Created", style="green")
    for number, prompt in enumerate(library.prompts, 1):
        table.add_row(str(number), prompt.text, prompt.created_at.astimezone().strftime("%b %d, %Y"))
    console.print(table)


def _last_assistant(session: ChatSession) -> Message | None:
    return next((m for m in reversed(session.messages) if m.sender is Role.ASSISTANT), None)


async def _handle_command(session: ChatSession, library: PromptLibrary, command: str) -> None:
    name, _, argument = command.partition(" ")

    if name == "/more":
        if not session.messages:
            console.print("[dim]Nothing to page through.[/dim]")
            return
        before = len(session.messages)
        await session.first_message_appeared(session.messages[0].id)
        console.print(f"[dim]Loaded {len(session.messages) - before} older messages.[/dim]")
        _print_conversation(session)

    elif name == "/usage":
        usage = session.usage
        console.print(f"[dim]Tokens: {usage.tokens:,}  Cost: ${usage.costs:.6f}[/dim]")

    elif name == "/regenerate":
        message = _last_assistant(session)
        if message is None:
            console.print("[yellow]No assistant message to regenerate.[/yellow]")
            return
        with console.status("[dim]Regenerating...[/dim]"):
            await session.perform(ContextAction.REGENERATE, message)
        _print_conversation(session)

    elif name == "/edit":
        try:
            message = session.messages[int(argument) - 1]
        except (ValueError, IndexError):
            console.print("[yellow]Usage: /edit <message number>[/yellow]")
            return
        if ContextAction.EDIT not in session.context_actions(message):
            console.print("[yellow]Only your own messages can be edited.[/yellow]")
            return
        session.edit(message)
        console.print(f"[dim]Editing:[/dim] {session.input_text}")
        console.print("[dim]Type the new text, or /cancel.[/dim]")

    elif name == "/cancel":
        session.cancel_editing()
        console.print("[dim]Edit cancelled.[/dim]")

    elif name == "/prompts":
        await library.load()
        _print_prompts(library)

    elif name == "/prompt":
        await library.load()
        try:
            prompt = library.prompts[int(argument) - 1]
        except (ValueError, IndexError):
            console.print("[yellow]Usage: /prompt <prompt number>[/yellow]")
            return
        library.use(prompt, session)
        console.print(f"[dim]Prompt loaded:[/dim] {session.input_text}")
        console.print("[dim]Press Enter to send it.[/dim]")

    elif name == "/new":
        session.start_new_chat()
        console.print("[dim]Started a new chat.[/dim]")

    else:
        console.print(f"[yellow]Unknown command: {name}[/yellow]")


@app.command()
def chat(
    chat_id: str | None = typer.Option(
        None,
        "--chat-id",
        "-c",
        help="Resume an existing chat"
    )
):
    """Start an interactive chat session."""
    async def _chat():
        configuration = get_configuration()
        settings = get_settings(configuration)
        message_store, model_store = get_store(configuration)
        prompt_store = get_prompt_store(configuration)

        async with HTTPTransport(timeout=configuration.http_timeout) as transport:
            orchestrator = get_orchestrator(configuration, message_store, model_store, transport)
            try:
                await message_store.connect()
                await prompt_store.connect()
                library = PromptLibrary(prompt_store)
                session = ChatSession(
                    orchestrator,
                    message_store,
                    settings=settings,
                    configuration=configuration,
                    chat_id=chat_id,
                )
                await session.on_appear()
                _print_conversation(session)

                console.print("[bold cyan]Cortexia Chat[/bold cyan]")
                console.print(
                    f"[dim]{settings.provider.display_name} / {settings.model_id or 'no model selected'}[/dim]"
                )
                console.print(
                    "[dim]Commands: /more /usage /regenerate /edit N /cancel /prompts /prompt N /new. "
                    "Type 'exit', 'quit', or 'q' to leave[/dim]\n"
                )

                while True:
                    try:
                        user_input = console.input("[bold yellow]You:[/bold yellow] ").strip()

                        if not user_input and not session.input_text:
                            continue

                        if user_input.lower() in ('exit', 'quit', 'q'):
                            console.print("[dim]Goodbye![/dim]")
                            break

                        if user_input.startswith("/"):
                            await _handle_command(session, library, user_input)
                            continue

                        known = {message.id for message in session.messages}
                        if user_input:
                            session.input_text = user_input
                        with console.status("[dim]Thinking...[/dim]"):
                            await session.send()

                        for message in session.messages:
                            if message.id not in known and message.sender is not Role.USER:
                                _print_message(message, session.settings)

                    except KeyboardInterrupt:
                        console.print("\n[dim]Goodbye![/dim]")
                        break
                    except EOFError:
                        console.print("\n[dim]Goodbye![/dim]")
                        break

                if session.chat_id:
                    console.print(f"[dim]Chat id: {session.chat_id}[/dim]")

            except Exception as e:
                console.print(f"[red]Error: {e}[/red]")
                raise typer.Exit(code=1)
            finally:
                await prompt_store.disconnect()
                await message_store.disconnect()

    asyncio.run(_chat())


@app.command()
def history(
    delete: str | None = typer.Option(
        None,
        "--delete",
        "-d",
        help="Delete the chat with this id"
    ),
    clear: bool = typer.Option(
        False,
        "--clear",
        help="Delete every chat"
    )
):
    """List past chats grouped by day."""
    async def _history():
        configuration = get_configuration()
        message_store, _ = get_store(configuration)

        try:
            await message_store.connect()
            chat_history = ChatHistory(message_store)

            if clear:
                if not typer.confirm("Delete every chat?"):
                    console.print("[dim]Aborted.[/dim]")
                    return
                groups = await chat_history.clear_history()
                console.print("[green]History cleared.[/green]")
            elif delete:
                groups = await chat_history.delete_chat(delete)
                console.print(f"[green]Deleted chat {delete}.[/green]")
            else:
                groups = await chat_history.load()

            if not groups:
                console.print("[dim]No chats yet.[/dim]")
                return

            for group in groups:
                table = Table(
                    title=group.date.strftime("%A, %B %d, %Y"),
                    show_header=True,
                    header_style="bold cyan"
                )
                table.add_column("Chat", style="dim")
                table.add_column("Started", style="green", width=10)
                table.add_column("First message")

                for lead in group.messages:
                    preview = lead.content if len(lead.content) <= 60 else lead.content[:57] + "..."
                    table.add_row(lead.chat_id, lead.sent_at.astimezone().strftime("%I:%M %p"), preview)

                console.print(table)

        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await message_store.disconnect()

    asyncio.run(_history())


@app.command()
def prompts(
    add: str | None = typer.Option(
        None,
        "--add",
        "-a",
        help="Save a new prompt"
    ),
    edit: int | None = typer.Option(
        None,
        "--edit",
        "-e",
        help="Number of the prompt to change (with --text)"
    ),
    text: str | None = typer.Option(
        None,
        "--text",
        help="New text for --edit"
    ),
    delete: int | None = typer.Option(
        None,
        "--delete",
        "-d",
        help="Number of the prompt to delete"
    )
):
    """List and manage saved prompts."""
    async def _prompts():
        configuration = get_configuration()
        prompt_store = get_prompt_store(configuration)

        try:
            await prompt_store.connect()
            library = PromptLibrary(prompt_store)
            await library.load()

            if add:
                await library.create(add)
                console.print("[green]Prompt saved.[/green]")
            elif edit is not None or delete is not None:
                number = edit if edit is not None else delete
                if not 1 <= number <= len(library.prompts):
                    console.print(f"[yellow]No prompt number {number}.[/yellow]")
                    raise typer.Exit(code=1)
                prompt = library.prompts[number - 1]
                if edit is not None:
                    if not text:
                        console.print("[yellow]--edit needs --text.[/yellow]")
                        raise typer.Exit(code=1)
                    await library.edit(prompt, text)
                    console.print(f"[green]Prompt {number} updated.[/green]")
                else:
                    await library.delete(prompt)
                    console.print(f"[green]Prompt {number} deleted.[/green]")

            _print_prompts(library)

        except typer.Exit:
            raise
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await prompt_store.disconnect()

    asyncio.run(_prompts())


@app.command()
def models(
    refresh: bool = typer.Option(
        False,
        "--refresh",
        "-r",
        help="Ignore the local cache and ask the provider"
    )
):
    """List the models of the selected provider."""
    async def _models():
        configuration = get_configuration()
        settings = get_settings(configuration)
        message_store, model_store = get_store(configuration)

        async with HTTPTransport(timeout=configuration.http_timeout) as transport:
            orchestrator = get_orchestrator(configuration, message_store, model_store, transport)
            try:
                await message_store.connect()
                response = await orchestrator.fetch_models(refresh, settings)

                table = Table(show_header=True, header_style="bold cyan")
                table.add_column("Model", style="cyan")
                table.add_column("Owner", style="dim")

                for model in response.data:
                    marker = " [green](selected)[/green]" if model.id == settings.model_id else ""
                    table.add_row(f"{model.id}{marker}", model.owned_by)

                console.print(table)
                console.print(f"[dim]{len(response.data)} models from {settings.provider.display_name}[/dim]")

            except Exception as e:
                console.print(f"[red]Error: {e}[/red]")
                raise typer.Exit(code=1)
            finally:
                await message_store.disconnect()

    asyncio.run(_models())


@app.command()
def configure(
    provider: CompatibleProvider | None = typer.Option(
        None,
        "--provider",
        "-p",
        help="Provider to chat with"
    ),
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="Model identifier"
    ),
    temperature: float | None = typer.Option(
        None,
        "--temperature",
        "-t",
        min=0.0,
        max=2.0,
        help="Sampling temperature (0.0-2.0)"
    ),
    ollama_base_url: str | None = typer.Option(
        None,
        "--ollama-url",
        help="Base URL of an Ollama-compatible API"
    ),
    word_wrap: bool | None = typer.Option(
        None,
        "--word-wrap/--no-word-wrap",
        help="Render messages as wrapped markdown"
    ),
    assistants_mode: bool | None = typer.Option(
        None,
        "--assistants/--no-assistants",
        help="Use the OpenAI assistants thread/run protocol"
    )
):
    """Show or change the persisted chat settings."""
    configuration = get_configuration()
    settings = get_settings(configuration)

    updates = {
        "provider": provider,
        "model_id": model,
        "temperature": temperature,
        "ollama_base_url": ollama_base_url,
        "word_wrap": word_wrap,
        "assistants_mode": assistants_mode,
    }
    updates = {key: value for key, value in updates.items() if value is not None}

    if updates:
        settings = ChatSettings.model_validate({**settings.model_dump(), **updates})
        settings.save(configuration.settings_path)
        console.print(f"[green]Saved settings to {configuration.settings_path}[/green]")

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="bold cyan", width=18)
    table.add_column("Value")

    table.add_row("Provider", settings.provider.display_name)
    table.add_row("Model", settings.model_id or "[dim]not selected[/dim]")
    table.add_row("Temperature", f"{settings.temperature:.1f}")
    table.add_row("Ollama base URL", settings.ollama_base_url or "[dim]not set[/dim]")
    table.add_row("Word wrap", "on" if settings.word_wrap else "off")
    table.add_row("Assistants mode", "on" if settings.assistants_mode else "off")

    console.print(table)


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
