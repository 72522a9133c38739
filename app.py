from __future__ import annotations
from typing import Optional
import os
import logging
import streamlit as st

from ai_compiler.completion import OpenAICompleter, make_client
from ai_compiler.config import Settings, load_settings
from ai_compiler.controller import SessionController
from ai_compiler.modes import Mode
from ai_compiler.session import Edit, SubmitInput, SubmitRun

# ================================================================
# Page / Logging / Outputs
# ================================================================
st.set_page_config(page_title="AI Compiler", page_icon="⚙️", layout="wide")

settings = load_settings()  # loads .env if present
os.makedirs(settings.output_dir, exist_ok=True)

LOG_FILE = settings.log_file
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    handlers=[logging.FileHandler(LOG_FILE, encoding="utf-8"), logging.StreamHandler()],
)
logger = logging.getLogger("ai_compiler_app")

# ================================================================
# API Key (safe loader)
# ================================================================
api_key: Optional[str] = settings.api_key
if not api_key:
    try:
        api_key = st.secrets["OPENAI_API_KEY"]
    except Exception:
        api_key = None

if not api_key:
    st.error("Missing OPENAI_API_KEY. Set it in your environment, .env, or .streamlit/secrets.toml")
    st.stop()

# ================================================================
# Sidebar Controls
# ================================================================
st.sidebar.header("⚙️ Settings")
model = st.sidebar.text_input("OpenAI model", value=settings.model, help="e.g., gpt-4o-mini, gpt-4.1-mini")
timeout_s = st.sidebar.number_input(
    "Request timeout (seconds)",
    min_value=0.0,
    value=float(settings.timeout or 0.0),
    step=5.0,
    help="0 waits for the reply indefinitely.",
)
max_retries = st.sidebar.slider("Max retries (API)", 0, 5, min(settings.max_retries, 5))
interactive = st.sidebar.toggle(
    "Interactive input",
    value=settings.interactive,
    help="Let the model stop at an input prompt and ask you for a value.",
)


@st.cache_resource(show_spinner=False)
def get_client(key: str, timeout: Optional[float]):
    return make_client(Settings(api_key=key, timeout=timeout))


completer = OpenAICompleter(get_client(api_key, timeout_s or None), model, retries=max_retries)

# ================================================================
# Session State
# ================================================================
if "controller" not in st.session_state:
    st.session_state.controller = SessionController(completer, interactive=interactive)
if "theme" not in st.session_state:
    st.session_state.theme = "dark"
if "input_round" not in st.session_state:
    st.session_state.input_round = 0  # fresh key for each input prompt

ctl: SessionController = st.session_state.controller
ctl.complete = completer
ctl.interactive = interactive

if "source_text" not in st.session_state:
    st.session_state.source_text = ctl.state.source_text


def _on_edit():
    ctl.dispatch(Edit(st.session_state.source_text))


def _on_run():
    # the editor may not have fired on_change yet when Run is clicked
    ctl.dispatch(Edit(st.session_state.source_text))
    ctl.dispatch(SubmitRun())


def _on_commit(key: str):
    ctl.dispatch(SubmitInput(st.session_state.get(key, "")))
    st.session_state.input_round += 1


def _toggle_theme():
    st.session_state.theme = "light" if st.session_state.theme == "dark" else "dark"


# ================================================================
# Theme (cosmetic, not persisted)
# ================================================================
if st.session_state.theme == "light":
    st.markdown(
        "<style>.stApp { background-color: #ffffff; color: #000000; }</style>",
        unsafe_allow_html=True,
    )
else:
    st.markdown(
        "<style>.stApp { background-color: #111827; color: #ffffff; }</style>",
        unsafe_allow_html=True,
    )

state = ctl.state

# ================================================================
# UI — Header
# ================================================================
left, right = st.columns([0.9, 0.1])
with left:
    st.title("AI Compiler")
    st.caption("Write code → Run → the model executes it and returns only the output.")
with right:
    dark = st.session_state.theme == "dark"
    st.button(
        "🌞" if dark else "🌙",
        key="theme_toggle",
        help=f"Switch to {'light' if dark else 'dark'} mode",
        on_click=_toggle_theme,
    )

# ================================================================
# UI — Editor & Output
# ================================================================
editor_col, output_col = st.columns(2)

with editor_col:
    st.text_area(
        "Code editor",
        key="source_text",
        height=500,
        placeholder="Write your code here...",
        disabled=state.mode != Mode.EDITING,
        on_change=_on_edit,
    )
    st.button(
        "Compiling..." if state.mode == Mode.RUNNING else "Run Code",
        key="run",
        type="primary",
        disabled=state.busy or state.mode != Mode.EDITING,
        on_click=_on_run,
    )

with output_col:
    st.markdown("**Output**")
    if state.mode == Mode.AWAITING_INPUT:
        stdin_key = f"stdin-{st.session_state.input_round}"
        st.text_input(
            "Program input",
            value=state.last_output,
            key=stdin_key,
            disabled=state.busy,
            on_change=_on_commit,
            args=(stdin_key,),
        )
        st.caption("Type your input after the prompt and press Enter.")
    else:
        st.code(state.last_output or "Output will appear here...", language=None)

    st.download_button(
        "💾 Download output",
        data=state.last_output.encode("utf-8"),
        file_name="output.txt",
        disabled=not state.last_output,
    )

# ================================================================
# Footer — Diagnostics
# ================================================================
with st.expander("Diagnostics & Last Run", expanded=False):
    st.json({"model": model, "mode": state.mode.value, "interactive": interactive, **ctl.last_run})
    st.caption(f"Logs: `{LOG_FILE}`")

st.caption("Built with Streamlit + OpenAI API.")

# ================================================================
# Execute queued completion calls after the busy controls are drawn
# ================================================================
if ctl.has_pending:
    label = "Compiling..." if ctl.state.mode == Mode.RUNNING else "Processing input..."
    with st.spinner(label):
        ctl.drain()
    logger.info("Run finished: %s", ctl.last_run)
    st.rerun()
