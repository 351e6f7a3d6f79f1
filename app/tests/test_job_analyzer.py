from app.services.pipeline.job_analyzer import analyze_job_description, classify_seniority, extract_key_skills


def test_seniority_precedence():
    assert classify_seniority("Principal Engineer, senior staff") == "principal"
    assert classify_seniority("Staff Software Engineer") == "staff"
    assert classify_seniority("Tech Lead") == "senior"
    assert classify_seniority("Entry level analyst") == "junior"
    assert classify_seniority("Early career program") == "junior"
    assert classify_seniority("Software Engineer") == "mid"


def test_keyword_buckets_map_to_categories_and_traits():
    analysis = analyze_job_description(
        "You will mentor engineers, collaborate with product, debug production issues "
        "and own the customer-facing roadmap using data and metrics."
    )
    assert analysis.suggested_categories[:3] == ["Leadership", "Teamwork", "Problem Solving"]
    assert "Customer Focus" in analysis.suggested_traits
    assert "Strategic Thinking" in analysis.suggested_traits
    assert analysis.suggested_traits.count("Data-Driven") == 1


def test_suggestions_are_deduplicated_in_order():
    analysis = analyze_job_description("deliver results, deliver impact, ship and execute")
    assert analysis.suggested_traits == ["Execution", "Results-Oriented"]
    assert len(analysis.suggested_categories) == len(set(analysis.suggested_categories))


def test_extract_key_skills():
    skills = extract_key_skills("Experience with Python, Kafka and proficient in SQL. Knowledge of AWS")
    assert "Python" in skills
    assert "SQL" in skills
    assert "AWS" in skills


def test_plain_description_defaults():
    analysis = analyze_job_description("Backend engineer")
    assert analysis.suggested_categories == []
    assert analysis.seniority_level == "mid"
