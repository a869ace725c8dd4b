from applypilot.sections import heading_name, infer_custom_fields, is_heading_like, section_text, segment


def test_heading_name_ignores_case_and_colon():
    assert heading_name("WORK EXPERIENCE:") == "experience"
    assert heading_name("Technical Skills") == "skills"
    assert heading_name("Senior Engineer") == ""


def test_segment_puts_preamble_in_implicit_summary():
    sections = segment("Jane Doe\njane@example.com\n\nExperience\nEngineer\n\nSkills\nPython")
    assert [(s.name, s.implicit) for s in sections] == [
        ("summary", True), ("experience", False), ("skills", False),
    ]
    assert sections[0].body == "Jane Doe\njane@example.com"
    assert section_text(sections, "skills") == "Python"
    assert section_text(sections, "summary") == ""
    assert section_text(sections, "summary", include_implicit=True).startswith("Jane Doe")


def test_segment_without_headings_is_one_implicit_section():
    sections = segment("just some text\nwith two lines")
    assert len(sections) == 1
    assert sections[0].implicit


def test_segment_with_custom_vocabulary():
    sections = segment("intro\nHobbies\nchess", known_headings=["hobbies"])
    assert [s.name for s in sections] == ["summary", "hobbies"]
    assert sections[1].body == "chess"


def test_segment_empty_input():
    assert segment("") == []
    assert segment(None) == []


def test_is_heading_like():
    assert is_heading_like("CLEARANCE")
    assert is_heading_like("Security Clearance:")
    assert not is_heading_like("Security Clearance")
    assert not is_heading_like("A1")
    assert not is_heading_like("X" * 50)
    assert not is_heading_like("AWS, GCP, SQL")
    assert not is_heading_like("LED A TEAM OF FIVE ENGINEERS")


def test_infer_custom_fields_known_and_unknown_sections():
    text = "\n".join([
        "JANE DOE",
        "jane@example.com",
        "",
        "CERTIFICATIONS",
        "AWS Certified Solutions Architect - Associate",
        "",
        "EXPERIENCE",
        "Engineer at Acme",
        "",
        "SECURITY CLEARANCE",
        "Active TS/SCI clearance with full-scope polygraph",
        "",
        "HOBBIES AND MORE",
        "short",
    ])
    fields = {f.label: f.value for f in infer_custom_fields(text)}
    assert fields["Certifications"] == "AWS Certified Solutions Architect - Associate"
    assert fields["SECURITY CLEARANCE"] == "Active TS/SCI clearance with full-scope polygraph"
    # The name line, parsed sections and short values never become fields.
    assert "JANE DOE" not in fields
    assert "EXPERIENCE" not in fields
    assert "HOBBIES AND MORE" not in fields


def test_infer_custom_fields_inline_value():
    fields = infer_custom_fields("Name\nLanguages: English, Spanish, Portuguese\n")
    assert [(f.label, f.value) for f in fields] == [("Languages", "English, Spanish, Portuguese")]


def test_infer_custom_fields_empty():
    assert infer_custom_fields("") == []


def test_all_caps_skill_list_is_not_a_custom_field():
    text = "\n".join([
        "Jane Doe",
        "",
        "SKILLS",
        "AWS, GCP, SQL",
        "Terraform modules for multi-account cloud landing zones",
    ])
    fields = infer_custom_fields(text)
    assert [f.label for f in fields] == []
