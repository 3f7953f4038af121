"""AgentLab rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from agentlab.cli.errors import err_no_db
    console.print(err_no_db(".agentlab.db"))
    raise typer.Exit(1)
"""

from __future__ import annotations


def err_missing_setting(env_var: str) -> str:
    """A required credential is not set (reported, not fatal)."""
    return (
        f"[red]Configuration error:[/] {env_var} is not set.\n"
        f"  Set:  export {env_var}=..."
    )


def err_no_database_url() -> str:
    """Neither --db nor AGENTLAB_DATABASE_URL was given."""
    return (
        "[red]Error:[/] No database configured.\n"
        "  Set:  export AGENTLAB_DATABASE_URL=file:agentlab.db\n"
        "  or pass  --db PATH"
    )


def err_no_db(db_path: str) -> str:
    """Database file does not exist yet."""
    return (
        f"[red]Error:[/] No database found at '{db_path}'.\n"
        "  Run:  agentlab init"
    )


def err_config(message: str) -> str:
    """Configuration could not be loaded or used."""
    return f"[red]Error:[/] {message}"


def err_no_api_key(provider: str, env_var: str) -> str:
    """No API key for *provider*."""
    return (
        f"[red]Error:[/] No API key for '{provider}'.\n"
        f"  Set:  export {env_var}=..."
    )


def err_no_projects(root: str) -> str:
    """Scan root holds no NN_ project folders."""
    return (
        f"[yellow]No project folders found in '{root}'.[/]\n"
        "  Project folders must be named like  01_My-Project"
    )


def err_no_embeddings() -> str:
    """Knowledge base has no embeddings, so retrieval finds nothing."""
    return (
        "[yellow]No embeddings in the knowledge base.[/]\n"
        "  Run:  agentlab prepare  then  agentlab embed"
    )


def err_answer_failed(reason: str) -> str:
    """Retrieval or generation failed for an interactive question."""
    return (
        f"[red]Error:[/] Could not answer the question: {reason}\n"
        "  Check your API key and network, then try again."
    )
