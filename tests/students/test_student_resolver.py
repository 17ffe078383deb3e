from tutortrack.core.constants import DEFAULT_STUDENT_EMAIL, DEFAULT_STUDENT_NAME
from tutortrack.students.resolver import StudentResolver


def test_creates_student_when_none_exists(empty_students_repo):
    resolver = StudentResolver(empty_students_repo, default_name="Raj")

    student_id = resolver.resolve()

    assert empty_students_repo.get_by_id(student_id).name == "Raj"
    assert empty_students_repo.get_by_id(student_id).email == DEFAULT_STUDENT_EMAIL


def test_blank_configured_name_falls_back_to_default(empty_students_repo):
    student_id = StudentResolver(empty_students_repo, default_name="  ").resolve()

    assert empty_students_repo.get_by_id(student_id).name == DEFAULT_STUDENT_NAME


def test_resolve_is_memoized(students_repo):
    resolver = StudentResolver(students_repo)

    assert resolver.resolve() == 1
    assert resolver.resolve() == 1
    assert students_repo.get_first_calls == 1


def test_invalidate_forces_lookup(students_repo):
    resolver = StudentResolver(students_repo)
    resolver.resolve()

    resolver.invalidate()

    assert resolver.cached_id is None
    assert resolver.resolve() == 1
    assert students_repo.get_first_calls == 2


def test_existing_student_is_not_duplicated(students_repo):
    StudentResolver(students_repo, default_name="Other").resolve()

    assert list(students_repo.rows) == [1]
