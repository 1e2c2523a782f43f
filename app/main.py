from __future__ import annotations

import sys
from pathlib import Path

import pandas as pd
import streamlit as st

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app.helpers import explain_match_row, format_amount, format_score, reasons_to_text
from src.engine import AllocationEngine
from src.grouping.assembler import groups_to_frame
from src.io.tables import load_directories
from src.matching.config import load_engine_config
from src.matching.eligibility import apply_eligibility_filter
from src.matching.scoring import score_candidates
from src.matching.store import ParquetMatchStore

DATA_DIR = ROOT_DIR / "data" / "input"
PROCESSED_DIR = ROOT_DIR / "data" / "processed"
CONFIG_PATH = ROOT_DIR / "data" / "engine_config.json"
MATCH_STORE_PATH = PROCESSED_DIR / "matches.parquet"


@st.cache_resource(show_spinner=False)
def _load_engine(data_dir_text: str) -> AllocationEngine:
    matching_config, grouping_config = load_engine_config(CONFIG_PATH)
    students, scholarships, applications = load_directories(Path(data_dir_text))
    return AllocationEngine(
        students,
        scholarships,
        ParquetMatchStore(MATCH_STORE_PATH),
        applications,
        matching_config=matching_config,
        grouping_config=grouping_config,
    )


def _top_matches_frame(engine: AllocationEngine, student_id: int, limit: int) -> pd.DataFrame:
    matches = engine.get_top_matches_for_student(student_id, limit)
    student = engine.students.get_student(student_id)
    if student is None or not matches:
        return pd.DataFrame()

    candidates_df = score_candidates(
        student, engine.scholarships.list_all_scholarships(), engine.matching_config
    ).set_index("scholarship_id")
    rows = []
    for match in matches:
        scholarship = engine.scholarships.get_scholarship(match.scholarship_id)
        why = ""
        if match.scholarship_id in candidates_df.index:
            why = reasons_to_text(explain_match_row(candidates_df.loc[match.scholarship_id]))
        rows.append(
            {
                "scholarship": scholarship.name if scholarship else match.scholarship_id,
                "amount": format_amount(scholarship.amount if scholarship else None),
                "score": format_score(match.match_score),
                "applied": "yes" if match.has_application else "no",
                "why": why,
            }
        )
    return pd.DataFrame(rows)


def _ineligible_frame(engine: AllocationEngine, student_id: int) -> pd.DataFrame:
    student = engine.students.get_student(student_id)
    if student is None:
        return pd.DataFrame()
    _, ineligible_df = apply_eligibility_filter(student, engine.scholarships.list_all_scholarships())
    return pd.DataFrame(
        {
            "scholarship": ineligible_df["name"].fillna(ineligible_df["scholarship_id"].astype(str)),
            "reasons": ineligible_df["reasons"].map(reasons_to_text),
        }
    )


def main() -> None:
    st.set_page_config(page_title="Scholarship Allocation", layout="wide")
    st.title("Scholarship Allocation")

    with st.sidebar:
        data_dir_text = st.text_input("Input data directory", value=str(DATA_DIR))
        if st.button("Regenerate all matches"):
            engine = _load_engine(data_dir_text)
            with st.spinner("Regenerating matches..."):
                results = engine.regenerate_all_matches()
            st.success(
                f"Regenerated {sum(len(matches) for matches in results.values())} matches "
                f"for {len(results)} students."
            )

    try:
        engine = _load_engine(data_dir_text)
    except FileNotFoundError as exc:
        st.error(str(exc))
        return

    matches_tab, groups_tab = st.tabs(["Student matches", "Compatible groups"])

    with matches_tab:
        students = engine.students.list_all_students()
        if not students:
            st.info("No students loaded.")
        else:
            labels = {f"{student.display_name} ({student.student_id})": student.student_id for student in students}
            selected = st.selectbox("Student", list(labels))
            limit = st.slider("Top matches", min_value=1, max_value=20, value=5)
            student_id = labels[selected]
            if st.button("Regenerate this student"):
                engine.regenerate_matches_for_student(student_id)
            top_df = _top_matches_frame(engine, student_id, limit)
            if top_df.empty:
                st.info("No qualifying matches for this student.")
            else:
                st.dataframe(top_df, use_container_width=True)
            ineligible_df = _ineligible_frame(engine, student_id)
            if not ineligible_df.empty:
                with st.expander(f"Ineligible scholarships ({len(ineligible_df)})"):
                    st.dataframe(ineligible_df, use_container_width=True, hide_index=True)

    with groups_tab:
        min_score = st.number_input(
            "Minimum match score",
            min_value=0.0,
            max_value=100.0,
            value=float(engine.grouping_config.min_match_score),
        )
        min_common = st.number_input(
            "Minimum shared scholarships",
            min_value=1,
            value=int(engine.grouping_config.min_common_scholarships),
            step=1,
        )
        groups = engine.find_compatible_student_groups(float(min_score), int(min_common))
        st.metric("Groups found", len(groups))
        if groups:
            st.dataframe(groups_to_frame(groups), use_container_width=True)


if __name__ == "__main__":
    main()
