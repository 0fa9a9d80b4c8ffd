import os
import pandas as pd
import streamlit as st
import altair as alt

# Local imports
from roster_tracker import config
from roster_tracker.fortnite_api import FortniteClient
from roster_tracker.matches import SPOILER_MASK, is_spoiler, project_matches, spoiler_view
from roster_tracker.models import RankingRecord
from roster_tracker.rankings import get_tournament_rankings
from roster_tracker.roster import find_roster_player, load_roster
from roster_tracker.windows import list_tournaments

# Bump this to invalidate Streamlit cache when data shape/mapping changes
CACHE_VERSION = "v1-cumulative"

DEFAULT_ROSTER_PATH = config.ROSTER_PATH or ""
SPOILER_DELAYS = [0, 1, 2, 3, 5, 10]

st.set_page_config(page_title="Roster Competitive History", page_icon="🏆", layout="wide", initial_sidebar_state="expanded")
st.markdown(
    """
    <style>
    h2, h3, h4, h5 { margin-top: 0.6rem; }
    .stDataFrame table { font-size: 0.92rem; }
    .block-container { padding-top: 1.2rem; }
    </style>
    """,
    unsafe_allow_html=True,
)
st.title("Roster Competitive History")

if not os.environ.get(config.API_KEY_ENV):
    st.warning(f"{config.API_KEY_ENV} is not set: no tournament data is available.")


@st.cache_data(show_spinner=False, ttl=config.CURRENT_EVENTS_TTL)
def load_tournaments(version: str):
    return list_tournaments()


@st.cache_data(show_spinner=False, ttl=config.LEADERBOARD_TTL)
def load_rankings(event_id: str, window_id: str, roster_path: str, version: str):
    roster = load_roster(roster_path or None)
    return get_tournament_rankings(event_id, window_id, client=FortniteClient.from_env(), roster=roster)


with st.sidebar:
    st.header("Inputs")
    roster_path = st.text_input("Roster file (JSON, optional)", value=DEFAULT_ROSTER_PATH)
    st.divider()
    with st.spinner("Loading tournaments..."):
        tournaments = load_tournaments(CACHE_VERSION)
    labels = [f"{t.display_date or '-'}  {t.event_name}" for t in tournaments]
    choice = st.selectbox("Tournament", options=range(len(tournaments)), format_func=lambda i: labels[i]) if tournaments else None
    spoiler_delay = st.selectbox(
        "Spoiler delay (minutes)", options=SPOILER_DELAYS, format_func=lambda m: "None" if m == 0 else f"{m} min",
        help="Hide totals and the latest match until this long after a player's last game ended",
    )
    if st.button("Refresh data cache"):
        st.cache_data.clear()

if choice is None:
    st.info("No tournament available.")
    st.stop()

selected = tournaments[choice]
with st.spinner("Loading leaderboard..."):
    rankings: list[RankingRecord] = load_rankings(selected.event_id, selected.event_window_id, roster_path, CACHE_VERSION)

with st.expander("Context", expanded=False):
    c1, c2, c3 = st.columns([2, 2, 1])
    with c1:
        st.caption(f"Event: {selected.event_id}")
    with c2:
        st.caption(f"Window: {selected.event_window_id}")
    with c3:
        st.caption(f"Date: {selected.display_date or '-'}")

page_tabs = st.tabs(["📊 Rankings", "🎮 Matches"])

with page_tabs[0]:
    st.subheader(selected.event_name)
    if not rankings:
        st.info("None of the roster players appear on this leaderboard (yet).")
    else:
        df_rank = pd.DataFrame([spoiler_view(r, spoiler_delay) for r in rankings])
        df_rank = df_rank[['rank', 'player', 'points', 'kills', 'wins', 'matches', 'kd', 'damage']]
        st.dataframe(
            df_rank.style.format({'kd': '{:.2f}', 'points': lambda v: v if v == SPOILER_MASK else f"{v:.0f}"}),
            use_container_width=True, hide_index=True,
        )
        # masked players stay off the chart
        df_chart = df_rank[df_rank['points'] != SPOILER_MASK].astype({'points': float})
        chart = (
            alt.Chart(df_chart)
            .mark_bar()
            .encode(
                x=alt.X("player:N", sort="-y", title=None),
                y=alt.Y("points:Q", axis=alt.Axis(title="Points", grid=True)),
                tooltip=["player:N", "rank:Q", "points:Q", "kills:Q", "wins:Q"],
            )
            .properties(height=320)
            .configure_axis(labelFontSize=12, titleFontSize=13)
        )
        st.altair_chart(chart, use_container_width=True)

with page_tabs[1]:
    st.subheader("Match details")
    if not rankings:
        st.info("No matches to show.")
    else:
        query = st.text_input("Player", value=rankings[0].player)
        roster = load_roster(roster_path or None)
        player = find_roster_player(query, roster)
        record = next((r for r in rankings if player and r.account_id == player.id), None)
        if record is None:
            st.warning(f"No result for {query!r} in this tournament.")
        else:
            if is_spoiler(record, spoiler_delay):
                st.caption(f"Results from the last {spoiler_delay} min are hidden.")
            details = project_matches(record, delay_minutes=spoiler_delay)
            df_matches = pd.DataFrame([vars(m) for m in details])
            if df_matches.empty:
                st.info(f"{record.player} has no recorded sessions.")
            else:
                st.dataframe(df_matches[['time', 'placement', 'kills', 'match_id']], use_container_width=True, hide_index=True)
                # chronological order for the chart
                df_chart = df_matches.iloc[::-1].reset_index(drop=True)
                df_chart['game'] = df_chart.index + 1
                placement_chart = (
                    alt.Chart(df_chart)
                    .mark_line(point=True)
                    .encode(
                        x=alt.X("game:O", title="Game"),
                        y=alt.Y("placement:Q", scale=alt.Scale(reverse=True), title="Placement"),
                        tooltip=["game:O", "time:N", "placement:Q", "kills:Q"],
                    )
                    .properties(height=280)
                )
                st.altair_chart(placement_chart, use_container_width=True)
