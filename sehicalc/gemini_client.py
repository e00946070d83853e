"""Gemini CLI client for sending prompts to the model."""

import json
import shutil
import subprocess
from typing import Optional


GEMINI_COMMAND = "gemini"


def is_available() -> bool:
    """True if the Gemini CLI is installed and on PATH."""
    return shutil.which(GEMINI_COMMAND) is not None


def _run_gemini_cli(
    prompt: str,
    timeout: int = 120,
    cwd: Optional[str] = None,
) -> str:
    """
    Run Gemini CLI with a prompt and return raw output.

    Args:
        prompt: The prompt to send to Gemini.
        timeout: Timeout in seconds (default 120).
        cwd: Working directory for the subprocess (optional).

    Returns:
        The raw stdout from Gemini CLI.

    Raises:
        RuntimeError: If Gemini CLI is missing, fails or times out.
    """
    cmd = [
        GEMINI_COMMAND,
        '--allowed-mcp-server-names', 'none',
        '-o', 'text',
        prompt
    ]

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
            cwd=cwd
        )
        return result.stdout.strip()

    except FileNotFoundError as e:
        raise RuntimeError(f"Gemini CLI not found: {GEMINI_COMMAND}") from e
    except subprocess.TimeoutExpired:
        raise RuntimeError(f"Gemini CLI timed out after {timeout}s")
    except subprocess.CalledProcessError as e:
        raise RuntimeError(
            f"Gemini CLI failed with exit code {e.returncode}.\n"
            f"Stderr: {e.stderr}"
        ) from e


def process_prompt(
    prompt: str,
    timeout: int = 120,
) -> str:
    """
    Process a simple text prompt using Gemini CLI.

    Returns:
        The text response from Gemini.

    Raises:
        RuntimeError: If Gemini CLI fails or times out.
    """
    return _run_gemini_cli(prompt, timeout=timeout)


def extract_json(response_str: str) -> dict:
    """
    Pull a JSON object out of a model reply.

    Handles replies wrapped in markdown code blocks or surrounded by
    commentary.

    Raises:
        ValueError: If no JSON object can be parsed.
    """
    if '```json' in response_str:
        response_str = response_str.split('```json')[1].split('```')[0].strip()
    elif '```' in response_str:
        response_str = response_str.split('```')[1].split('```')[0].strip()

    # Try to find JSON object if not at start
    if not response_str.strip().startswith('{'):
        start = response_str.find('{')
        end = response_str.rfind('}') + 1
        if start >= 0 and end > start:
            response_str = response_str[start:end]

    try:
        data = json.loads(response_str)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse JSON from Gemini output: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data
