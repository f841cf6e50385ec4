from fakes import make_job

from jobsearch.pipeline.boolean_query import BooleanQuery, apply_boolean_filters, parse_boolean_string


def test_grouped_titles_skills_and_exclusions():
    parsed = parse_boolean_string("(Engineer OR Developer) AND Python -Senior")
    assert parsed.titles == ["Engineer", "Developer"]
    assert "Python" in parsed.skills
    assert "Senior" in parsed.exclusions


def test_top_level_or_without_parentheses():
    parsed = parse_boolean_string("Engineer OR Developer AND Python")
    assert parsed.titles == ["Engineer", "Developer"]
    assert parsed.skills == ["Python"]


def test_not_keyword_and_quoted_title():
    parsed = parse_boolean_string('"Data Scientist" NOT Manager')
    assert parsed.titles == ["Data Scientist"]
    assert parsed.exclusions == ["Manager"]
    assert parsed.skills == []


def test_hyphenated_words_are_not_exclusions():
    parsed = parse_boolean_string("Full-stack Engineer")
    assert parsed.exclusions == []
    assert parsed.titles == ["Full-stack Engineer"]


def test_parenthesised_skill_group_is_not_a_skill():
    parsed = parse_boolean_string("Engineer AND (Python OR Go)")
    assert "(Python" not in parsed.skills


def test_apply_filters_needs_any_skill_and_no_exclusion():
    jobs = [
        make_job(id="a", title="Backend Engineer", description="Python and SQL"),
        make_job(id="b", title="Senior Engineer", description="Python services"),
        make_job(id="c", title="Frontend Engineer", description="React"),
        make_job(id="d", title="Data Engineer", description="Scala, some Go"),
    ]
    parsed = BooleanQuery(titles=["Engineer"], skills=["Python", "Go"], exclusions=["Senior"])
    kept = apply_boolean_filters(jobs, parsed)
    assert [j.id for j in kept] == ["a", "d"]


def test_apply_filters_without_terms_is_identity():
    jobs = [make_job(id="a"), make_job(id="b")]
    assert apply_boolean_filters(jobs, BooleanQuery(titles=["x"])) == jobs
