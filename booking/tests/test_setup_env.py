from setup_env import render_env


def test_replaces_insecure_key():
    content = 'SECRET_KEY=django-insecure-change-me\nDEBUG=True'
    assert render_env(content, 'new-key') == 'SECRET_KEY=new-key\nDEBUG=True'


def test_keeps_real_key():
    content = 'SECRET_KEY=already-set\nDEBUG=False'
    assert render_env(content, 'new-key') == content
