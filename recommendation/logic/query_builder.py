"""
Query Builder

Turns a StudentLearningProfile into a short, deduplicated list of search queries.
"""

from typing import List

from .constants import (
    MAX_QUERIES,
    DEFAULT_QUERIES,
    PROGRAM_QUERY_TEMPLATE,
    DEPARTMENT_QUERY_TEMPLATE,
    QUALIFICATION_QUERY_TEMPLATES,
    REQUIREMENT_QUERY_TEMPLATES,
    DEFAULT_REQUIREMENT_QUERY_TEMPLATE,
    RESULTS_PER_QUERY,
    RESULTS_PER_QUERY_MANY,
    MANY_QUERIES_THRESHOLD,
)
from .contracts import StudentLearningProfile


def build_search_queries(profile: StudentLearningProfile, limit: int = MAX_QUERIES) -> List[str]:
    """
    Program, department, qualification subjects, then requirement subjects.
    Case-insensitive duplicates are dropped; first occurrence wins.
    """
    candidates: List[str] = []

    if profile.program_name:
        candidates.append(PROGRAM_QUERY_TEMPLATE.format(name=profile.program_name.strip()))
    if profile.department_name:
        candidates.append(DEPARTMENT_QUERY_TEMPLATE.format(name=profile.department_name.strip()))

    for q in profile.qualifications:
        subject = q.subject.strip()
        if not subject:
            continue
        template = QUALIFICATION_QUERY_TEMPLATES.get(q.type, QUALIFICATION_QUERY_TEMPLATES["OTHER"])
        candidates.append(template.format(subject=subject))

    for r in profile.requirements:
        subject = r.subject.strip()
        if not subject:
            continue
        template = REQUIREMENT_QUERY_TEMPLATES.get(r.type, DEFAULT_REQUIREMENT_QUERY_TEMPLATE)
        candidates.append(template.format(subject=subject))

    if not candidates:
        candidates = list(DEFAULT_QUERIES)

    seen = set()
    queries: List[str] = []
    for query in candidates:
        key = " ".join(query.lower().split())
        if key in seen:
            continue
        seen.add(key)
        queries.append(query)
        if len(queries) >= limit:
            break
    return queries


def results_per_query(query_count: int) -> int:
    return RESULTS_PER_QUERY_MANY if query_count > MANY_QUERIES_THRESHOLD else RESULTS_PER_QUERY
