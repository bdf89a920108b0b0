"""
User-friendly console output for snapfit.
"""

import time
from typing import Any, Dict, Optional
from datetime import datetime


STATUS_ICONS = {
    "info": "ℹ️",
    "success": "✅",
    "warning": "⚠️",
    "error": "❌",
    "loading": "⏳",
    "processing": "🔄",
    "snap": "🧲",
    "hint": "💡",
}

PART_ICONS = {
    "idle": "⬜",
    "grabbed": "✋",
    "snapped": "🧲",
}


def format_clock(seconds: float) -> str:
    """Format seconds as m:ss."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


def stars_text(stars: int) -> str:
    return "★" * stars + "☆" * (3 - stars)


class StatusDisplay:
    """Formatted console output for levels, parts and results."""

    @staticmethod
    def print_header(title: str, width: int = 80):
        """Print a formatted header."""
        print("\n" + "=" * width)
        print(f"{title:^{width}}")
        print("=" * width)

    @staticmethod
    def print_section(title: str, width: int = 60):
        """Print a section header."""
        print(f"\n📋 {title}")
        print("-" * width)

    @staticmethod
    def print_config(config_dict: Dict[str, Any], title: str = "Configuration"):
        """Print configuration in a nice format."""
        StatusDisplay.print_section(title)
        for key, value in config_dict.items():
            print(f"  {key:<20} : {value}")

    @staticmethod
    def print_status(message: str, status: str = "info"):
        """Print a status message with appropriate emoji."""
        icon = STATUS_ICONS.get(status, STATUS_ICONS["info"])
        timestamp = datetime.now().strftime("%H:%M:%S")
        print(f"{icon} [{timestamp}] {message}")

    @staticmethod
    def print_results(results: Dict[str, Any], title: str = "Results"):
        """Print results in a nice format."""
        StatusDisplay.print_section(title)
        for key, value in results.items():
            if isinstance(value, bool):
                icon = "✅" if value else "❌"
                print(f"  {key:<20} : {icon} {value}")
            elif isinstance(value, float):
                print(f"  {key:<20} : {value:.3f}")
            else:
                print(f"  {key:<20} : {value}")

    @staticmethod
    def print_session(state: Dict[str, Any]):
        """Print the HUD view of a session dictionary (``GameSession.to_dict``)."""
        stats = state.get("stats", {})
        line = (f"  {state.get('level_name') or state.get('level')}"
                f" | {state.get('phase')}"
                f" | parts {state.get('snapped', 0)}/{state.get('total_parts', 0)}"
                f" | time {format_clock(stats.get('elapsed', 0.0))}")
        if state.get("time_remaining") is not None:
            line += f" (left {format_clock(state['time_remaining'])})"
        line += f" | {stars_text(stats.get('stars', 3))}"
        print(line)
        for part in state.get("parts", []):
            marker = "▶" if part["id"] == state.get("selected_part") else " "
            icon = PART_ICONS.get(part["status"], "")
            pos = ", ".join(f"{c:.2f}" for c in part["pose"]["position"])
            print(f"  {marker} {icon} {part['id']:<10} -> {part['target_socket']:<10} pos=({pos})")
        feedback = state.get("feedback")
        if feedback:
            StatusDisplay.print_status(feedback["message"], "snap" if feedback["is_correct_target"] else "warning")
        if state.get("hint_target") is not None:
            target = ", ".join(f"{c:.2f}" for c in state["hint_target"])
            StatusDisplay.print_status(f"{state['hint_part']} goes to ({target})", "hint")

    @staticmethod
    def print_separator(char: str = "-", length: int = 60):
        """Print a separator line."""
        print(char * length)

    @staticmethod
    def ask_confirmation(message: str) -> bool:
        """Ask for user confirmation."""
        response = input(f"❓ {message} (y/N): ").strip().lower()
        return response in ['y', 'yes']


class LiveLogger:
    """Verbosity-gated live logging of session events."""

    def __init__(self, verbose: bool = True):
        self.verbose = verbose
        self.command_times: Dict[int, float] = {}

    def log_command_start(self, index: int, command: str):
        """Log the start of a command."""
        if self.verbose:
            StatusDisplay.print_status(f"Command {index}: {command}", "processing")
        self.command_times[index] = time.time()

    def log_command_end(self, index: int, result: str, success: bool = True):
        """Log the end of a command."""
        if self.verbose:
            elapsed = time.time() - self.command_times.pop(index, time.time())
            status = "success" if success else "error"
            StatusDisplay.print_status(f"Command {index}: {result} ({elapsed:.2f}s)", status)

    def log_action(self, action_name: str, details: str = ""):
        """Log an action being performed."""
        if self.verbose:
            message = f"Executing: {action_name}"
            if details:
                message += f" - {details}"
            StatusDisplay.print_status(message, "processing")

    def log_result(self, message: str, success: bool = True):
        """Log a result."""
        if self.verbose:
            status = "success" if success else "error"
            StatusDisplay.print_status(message, status)

    def log_info(self, message: str):
        """Log an info message."""
        if self.verbose:
            StatusDisplay.print_status(message, "info")

    def log_warning(self, message: str):
        """Log a warning message."""
        if self.verbose:
            StatusDisplay.print_status(message, "warning")

    def log_error(self, message: str, details: Optional[str] = None):
        """Log an error message."""
        if self.verbose:
            if details:
                message = f"{message}: {details}"
            StatusDisplay.print_status(message, "error")
