"""Review AI-proposed file edits hunk by hunk before they touch disk."""
