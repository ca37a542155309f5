import logging
from typing import Optional

import pandas as pd
import streamlit as st

from travel_assistant import build_orchestrator
from travel_state.model import AttractionResult, FlightSearchResult, HotelSearchResult
from travel_tools.config import load_settings
from travel_tools.errors import UnknownToolError


def results_table(result) -> Optional[pd.DataFrame]:
    """Top-N rows of a structured search result, for display next to the answer."""
    if isinstance(result, FlightSearchResult):
        rows = [{"price (USD)": f.price.amount, "carriers": ", ".join(f.carriers), "score": f.score}
                for f in result.top_flights]
    elif isinstance(result, HotelSearchResult):
        rows = [{"hotel": h.name, "rating": h.rating, "reviews": h.review_count, "lowest price (USD)": h.lowest_price}
                for h in result.top_hotels]
    elif isinstance(result, AttractionResult):
        rows = [{"attraction": a.name, "rating": a.rating, "distance (m)": a.distance, "address": a.address}
                for a in result.attractions]
    else:
        return None
    return pd.DataFrame(rows) if rows else None


# --- page ---
st.set_page_config(page_title="Travel Assistant", layout="wide")
st.title("Travel Assistant")
st.caption("Ask for attractions in a city, one-way flights, or hotels for your dates.")

settings = load_settings()
logging.basicConfig(level=settings.log_level)

if not settings.openai_api_key:
    st.error("Please set OPENAI_API_KEY in the .env file")
    st.stop()

# one conversation per browser session
if "orchestrator" not in st.session_state:
    st.session_state.orchestrator = build_orchestrator(settings)
    st.session_state.history = []

for entry in st.session_state.history:
    with st.chat_message(entry["role"]):
        st.markdown(entry["text"])
        if entry.get("table") is not None:
            st.dataframe(entry["table"], use_container_width=True)

prompt = st.chat_input("e.g. find hotels in city 60763 from 2026-11-02 to 2026-11-05 for 2 adults in 1 room")
if prompt:
    st.session_state.history.append({"role": "user", "text": prompt})
    with st.chat_message("user"):
        st.markdown(prompt)

    with st.chat_message("assistant"):
        with st.spinner("Searching..."):
            try:
                outcome = st.session_state.orchestrator.ask(prompt)
            except UnknownToolError as e:
                outcome = None
                st.warning(e.message)

        if outcome is None:
            text, table = "Sorry, I could not get an answer this time. Please try again.", None
        else:
            text, table = outcome.text, results_table(outcome.result)
        st.markdown(text)
        if table is not None:
            st.dataframe(table, use_container_width=True)

    st.session_state.history.append({"role": "assistant", "text": text, "table": table})
