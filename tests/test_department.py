from innovators.services.department_service import (
    example_teams,
    is_skip_department,
    looks_like_question,
    normalize_department_text,
    resolve_department,
)

TEAMS = ["Sales", "Engineering", "Customer Success", "Finance", "Revenue Operations"]
ALIASES = {"cs": "Customer Success", "dev": "Engineering", "revops": "Revenue Operations", "accounting": "Finance"}


class TestResolveDepartment:
    def test_exact_match_case_insensitive(self):
        assert resolve_department("sales", TEAMS, ALIASES) == "Sales"
        assert resolve_department("  ENGINEERING ", TEAMS, ALIASES) == "Engineering"

    def test_alias(self):
        assert resolve_department("CS", TEAMS, ALIASES) == "Customer Success"
        assert resolve_department("revops", TEAMS, ALIASES) == "Revenue Operations"

    def test_contains_team_name(self):
        assert resolve_department("I'm in sales", TEAMS, ALIASES) == "Sales"

    def test_partial_team_name(self):
        assert resolve_department("engineer", TEAMS, ALIASES) == "Engineering"

    def test_team_suffix_stripped(self):
        assert resolve_department("Finance team", TEAMS, ALIASES) == "Finance"
        assert resolve_department("accounting dept.", TEAMS, ALIASES) == "Finance"

    def test_alias_inside_text(self):
        assert resolve_department("mostly dev work", TEAMS, ALIASES) == "Engineering"

    def test_team_name_inside_longer_word(self):
        assert resolve_department("presales", TEAMS, ALIASES) == "Sales"
        assert resolve_department("devops", TEAMS, ALIASES) == "Engineering"

    def test_short_names_need_whole_words(self):
        assert resolve_department("three", ["HR", "Sales"], {"qa": "Sales"}) is None
        assert resolve_department("hr please", ["HR", "Sales"]) == "HR"

    def test_no_match(self):
        assert resolve_department("astronauts", TEAMS, ALIASES) is None
        assert resolve_department("", TEAMS, ALIASES) is None

    def test_short_fragment_does_not_partially_match(self):
        assert resolve_department("s", TEAMS, ALIASES) is None


class TestLooksLikeQuestion:
    def test_question_mark(self):
        assert looks_like_question("reports?")

    def test_long_text(self):
        assert looks_like_question("our weekly reporting takes forever to put together by hand")

    def test_question_starter(self):
        assert looks_like_question("how automate invoices")

    def test_intent_phrase(self):
        assert looks_like_question("automate invoices")

    def test_team_like_text(self):
        assert not looks_like_question("astronauts")
        assert not looks_like_question("")


class TestHelpers:
    def test_skip_words(self):
        assert is_skip_department("Skip")
        assert is_skip_department("n/a")
        assert not is_skip_department("sales")

    def test_normalize(self):
        assert normalize_department_text("  The  Sales   Team! ") == "the sales"

    def test_example_teams(self):
        assert example_teams(TEAMS, limit=2) == "Sales, Engineering"
