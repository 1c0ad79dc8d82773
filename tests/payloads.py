NUMERIC_PAYLOAD = {
    "channels": 2,
    "infos": [
        {"channel": "a", "published_messages": 10, "stored_messages": 3, "subscribers": 5},
        {"channel": "b", "published_messages": 1, "stored_messages": 0, "subscribers": 2},
    ],
}

STRING_PAYLOAD = {
    "channels": "2",
    "infos": [
        {"channel": "a", "published_messages": "10", "stored_messages": "3", "subscribers": "5"},
        {"channel": "b", "published_messages": "1", "stored_messages": "0", "subscribers": "2"},
    ],
}

EXPECTED_SAMPLES = {
    ("channels", (("channel", "all"),), 2.0),
    ("subscribers", (("channel", "a"),), 5.0),
    ("subscribers", (("channel", "b"),), 2.0),
    ("published_messages", (("channel", "a"),), 10.0),
    ("published_messages", (("channel", "b"),), 1.0),
    ("stored_messages", (("channel", "a"),), 3.0),
    ("stored_messages", (("channel", "b"),), 0.0),
    ("subscribers_total", (("channel", "all"),), 7.0),
}


def as_set(samples):
    """Key samples by (metric, labels, value) so order does not matter."""
    return {(s.metric_key, tuple(sorted(s.labels.items())), s.value) for s in samples}
