"""All CSS strings for the agentwatch dashboard."""

APP_CSS = """
Screen {
    background: #000000;
    overflow: hidden;
    scrollbar-size: 0 0;
}

#title-bar {
    height: 1;
    background: #1a1030;
    color: #a78bfa;
    padding: 0 1;
}

#title-text {
    width: auto;
    color: #a78bfa;
    text-style: bold;
}

#title-clock {
    color: #4b4b6b;
}

#frame {
    height: 1fr;
    background: #000000;
    color: #ffffff;
}

#status-line {
    height: 1;
    padding: 0 1;
    background: #0a0a14;
    color: #6b7280;
}
"""
