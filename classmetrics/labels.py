import re
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from .errors import DatabaseNotFound
from .utils import check_input_file

#Key path of a mapping-table record, e.g. train.zip@/n01440764/n01440764_10026.JPEG
TRAIN_MAP_KEY=re.compile(r'@/n(?P<id>\d+)/')
RANK=re.compile(r'\d\d')
WORD=re.compile(r'\w+')
SYNONYM=re.compile(r'[A-Za-z_]+')

def parse_train_map(text: str) -> Dict[int, str]:
    """
    Index a mapping table as class offset -> wordnet id.

    Each record holds a key path embedding `@/n<digits>/` and ends with the
    numeric class offset. The first record of an offset wins.
    """
    index={}
    for line in text.splitlines():
        fields=line.split()
        if len(fields)<2:
            continue

        match=TRAIN_MAP_KEY.search(fields[0])
        if not match or not fields[-1].isdigit():
            continue
        index.setdefault(int(fields[-1]), match.group('id'))
    return index

def parse_wordnet_record(line: str) -> Optional[tuple]:
    """
    Split one lexical record into (wordnet_id, label), None if malformed.

    The rank field accepts any two digit value but 00, so 01-09 pass as well
    as 10-99; WordNet lexicographer files such as noun.animal (05) need that.
    """
    fields=line.split()
    if len(fields)<3 or not fields[0].isdigit():
        return None

    #Two digit rank (00 excluded) followed by a one letter part of speech tag
    rank, pos=fields[1], fields[2]
    if not RANK.fullmatch(rank) or rank=='00' or len(pos)!=1 or not WORD.fullmatch(pos):
        return None

    i=3
    while i<len(fields) and fields[i].isdigit():
        i+=1
    if i>=len(fields):
        return fields[0], ''

    term_match=WORD.match(fields[i])
    term=term_match.group(0) if term_match else ''

    synonym=''
    complete_term=term_match is not None and term_match.end()==len(fields[i])
    if complete_term and i+2<len(fields) and re.fullmatch(r'\d', fields[i+1]):
        synonym_match=SYNONYM.match(fields[i+2])
        synonym=synonym_match.group(0) if synonym_match else ''

    if synonym:
        return fields[0], f"{term} ({synonym})"
    return fields[0], term

def parse_wordnet(text: str) -> Dict[str, str]:
    """Index a lexical database as wordnet id -> label, first record wins"""
    index={}
    for line in text.splitlines():
        record=parse_wordnet_record(line)
        if record is not None:
            index.setdefault(*record)
    return index


class LabelResolver:
    """
    Resolves class offsets to wordnet ids and human readable labels.

    The mapping table is read eagerly. The lexical database is only read on
    the first label lookup and reused afterwards. Unresolved lookups give an
    empty string.
    """

    def __init__(self, train_map_path: str, wordnet_path: str=None):
        path=check_input_file(train_map_path, f"The map file path {train_map_path} can't be located!")

        self.logger=logging.getLogger(__name__)
        self.wordnet_path=wordnet_path
        self.offset_to_id=parse_train_map(path.read_text(encoding='utf-8'))
        self._labels=None
        self.logger.debug(f"Indexed {len(self.offset_to_id)} classes from {path}")

    @property
    def labels(self) -> Dict[str, str]:
        if self._labels is None:
            path=check_input_file(
                self.wordnet_path,
                f"The wordnet file path {self.wordnet_path} can't be located!",
                error=DatabaseNotFound
            )
            self._labels=parse_wordnet(Path(path).read_text(encoding='utf-8'))
        return self._labels

    def wordnet_id(self, offset: int) -> str:
        wordnet_id=self.offset_to_id.get(int(offset), '')
        if not wordnet_id:
            self.logger.debug(f"No mapping-table record for class offset {offset}")
        return wordnet_id

    def label_for(self, offset: int) -> str:
        wordnet_id=self.wordnet_id(offset)
        if not wordnet_id:
            return ''
        label=self.labels.get(wordnet_id, '')
        if not label:
            self.logger.debug(f"No lexical record for wordnet id {wordnet_id}")
        return label

    def wordnet_ids(self, offsets: Iterable[int]) -> List[str]:
        return [self.wordnet_id(offset) for offset in offsets]

    def classifications(self, offsets: Iterable[int]) -> List[str]:
        return [self.label_for(offset) for offset in offsets]
