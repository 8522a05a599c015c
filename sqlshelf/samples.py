"""
Sample statements offered to new users, grouped by difficulty.
"""

from __future__ import annotations

from typing import Dict, List

SAMPLE_QUERIES: Dict[str, List[str]] = {
    "beginner": [
        "CREATE TABLE students (id INTEGER PRIMARY KEY, name TEXT, age INTEGER);",
        "INSERT INTO students (name, age) VALUES ('Alice', 20), ('Bob', 22), ('Charlie', 19);",
        "SELECT * FROM students;",
        "SELECT name FROM students WHERE age > 20;",
    ],
    "intermediate": [
        "CREATE TABLE courses (id INTEGER PRIMARY KEY, name TEXT, credits INTEGER);",
        "CREATE TABLE enrollments (student_id INTEGER, course_id INTEGER, grade TEXT);",
        "INSERT INTO courses VALUES (1, 'Database Systems', 3), (2, 'Web Development', 4);",
        "SELECT s.name, c.name, e.grade FROM students s "
        "JOIN enrollments e ON s.id = e.student_id JOIN courses c ON c.id = e.course_id;",
    ],
    "advanced": [
        "CREATE VIEW student_stats AS "
        "SELECT COUNT(*) as total_students, AVG(age) as avg_age FROM students;",
        "SELECT name, age, (age - (SELECT AVG(age) FROM students)) as age_diff FROM students;",
        "CREATE INDEX idx_student_age ON students(age);",
    ],
}


def sample_levels() -> List[str]:
    return list(SAMPLE_QUERIES)


def samples_for(level: str) -> List[str]:
    if level not in SAMPLE_QUERIES:
        raise ValueError(f"Unknown level '{level}'. Available: {', '.join(SAMPLE_QUERIES)}")
    return list(SAMPLE_QUERIES[level])


__all__ = ["SAMPLE_QUERIES", "sample_levels", "samples_for"]
