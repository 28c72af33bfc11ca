from typing import Dict, Iterable, List

from ..models.article import Article, TopicIndex


def build_topic_index(corpus: Iterable[Article]) -> TopicIndex:
    """
    Group ``corpus`` by topic tag.

    Groups keep the corpus order, so each group is best-ranked-first, and
    topics appear in order of first occurrence.
    """
    groups: Dict[str, List[Article]] = {}
    for article in corpus:
        groups.setdefault(article.topic, []).append(article)
    return {topic: tuple(articles) for topic, articles in groups.items()}
