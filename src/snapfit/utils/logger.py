import os
import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from PIL import Image


class SessionLogger:
    def __init__(self, log_dir: str, session_name: str):
        """
        Initializes the logger for one play session.

        Args:
            log_dir (str): The base directory for logs.
            session_name (str): Name of the session, usually the level id.
        """
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.session_name = f"{session_name}_{self.timestamp}"
        self.run_dir = os.path.join(log_dir, self.session_name)
        self.frames_dir = os.path.join(self.run_dir, "frames")
        self.logs: List[Dict[str, Any]] = []
        self.final_state: Optional[Dict[str, Any]] = None

        os.makedirs(self.run_dir, exist_ok=True)
        os.makedirs(self.frames_dir, exist_ok=True)

    def log_step(self, step: int, data: Dict[str, Any], verbose: bool = False):
        """
        Logs a single command of the session.

        Args:
            step (int): The command index.
            data (Dict[str, Any]): Data to log; an ``image`` entry holding a
                PIL image is written to the frames directory instead.
            verbose (bool): Whether to print step information to console.
        """
        log_entry = {"step": step, "timestamp": datetime.now().isoformat(), **data}

        if "image" in log_entry:
            image = log_entry.pop("image")
            if isinstance(image, Image.Image):
                image_path = os.path.join(self.frames_dir, f"step_{step}.png")
                image.save(image_path)
                log_entry["image_path"] = image_path
                if verbose:
                    print(f"  📷 Saved frame: step_{step}.png")

        if verbose:
            step_type = data.get("step_type", "unknown")
            if step_type == "initial":
                print(f"🚀 Step {step}: Level loaded")
            elif step_type == "action":
                action_type = data.get("action", {}).get("action_type", "unknown")
                print(f"⚡ Step {step}: '{action_type}'")
                if data.get("tool_result"):
                    print(f"  📋 Result: {data['tool_result'].get('message')}")
            elif step_type == "error":
                print(f"❌ Step {step}: Error occurred")
                print(f"  🔍 Details: {data.get('error', 'Unknown error')}")

        self.logs.append(log_entry)

    def set_final_state(self, state: Dict[str, Any]):
        self.final_state = state

    def save_logs(self, verbose: bool = True) -> str:
        """Writes session_log.json and summary.txt; returns the JSON path."""
        log_file = os.path.join(self.run_dir, "session_log.json")
        with open(log_file, "w", encoding="utf-8") as f:
            json.dump({"steps": self.logs, "final_state": self.final_state}, f, indent=2, default=str)

        summary_file = os.path.join(self.run_dir, "summary.txt")
        self._create_summary_file(summary_file)

        if verbose:
            print(f"📁 Logs saved to: {log_file}")
            print(f"📋 Summary saved to: {summary_file}")
        return log_file

    def _create_summary_file(self, summary_file: str):
        """Create a human-readable summary file."""
        actions = [log for log in self.logs if log.get("step_type") == "action"]
        failed = [log for log in actions if (log.get("tool_result") or {}).get("status") == "error"]
        errors_occurred = len([log for log in self.logs if log.get("step_type") == "error"])
        snaps = [log for log in actions if log.get("action", {}).get("action_type") == "snap"]

        with open(summary_file, "w", encoding="utf-8") as f:
            f.write(f"Session Summary: {self.session_name}\n")
            f.write("=" * 60 + "\n")
            f.write(f"Commands: {len(actions)}\n")
            f.write(f"Rejected Commands: {len(failed)}\n")
            f.write(f"Snap Attempts: {len(snaps)}\n")
            f.write(f"Errors Occurred: {errors_occurred}\n")
            f.write(f"Frames Saved: {len([log for log in self.logs if 'image_path' in log])}\n")
            if self.final_state:
                stats = self.final_state.get("stats", {})
                f.write(f"Final Phase: {self.final_state.get('phase')}\n")
                f.write(f"Parts Snapped: {self.final_state.get('snapped')}/{self.final_state.get('total_parts')}\n")
                f.write(f"Stars: {stats.get('stars')}  Hints: {stats.get('hints_used')}  "
                        f"Mistakes: {stats.get('mistakes')}  Time: {stats.get('elapsed')}s\n")
            f.write("\nStep-by-step breakdown:\n")
            f.write("-" * 30 + "\n")

            for log in self.logs:
                step = log.get("step", "?")
                step_type = log.get("step_type", "unknown")
                if step_type == "initial":
                    f.write(f"Step {step}: Level loaded\n")
                elif step_type == "action":
                    action = log.get("action", {})
                    f.write(f"Step {step}: '{action.get('action_type', 'unknown')}' {action.get('parameters', {})}\n")
                    if log.get("tool_result"):
                        f.write(f"  Result: {log['tool_result'].get('status')} - {log['tool_result'].get('message')}\n")
                elif step_type == "error":
                    f.write(f"Step {step}: ERROR - {log.get('error', 'Unknown')}\n")
