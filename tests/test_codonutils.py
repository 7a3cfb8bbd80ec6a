import unittest
from codonvar.codonutils import (
    CODON_TABLE,
    STOP_CODONS,
    INDETERMINATE,
    encode_codon,
    decode_codon,
    translate_codon
)


class TestCodonUtils(unittest.TestCase):

    def test_encode_codon(self) -> None:
        self.assertEqual(encode_codon(b'AAA'), 0)
        self.assertEqual(encode_codon(b'CTG'), 30)
        self.assertEqual(encode_codon(b'TAA'), 48)
        self.assertEqual(encode_codon(b'TTT'), 63)
        self.assertEqual(encode_codon(b'ANG'), INDETERMINATE)
        self.assertEqual(encode_codon(b'AG'), INDETERMINATE)
        self.assertEqual(encode_codon(b'AGTA'), INDETERMINATE)

    def test_decode_codon(self) -> None:
        self.assertEqual(decode_codon(14), b'ATG')
        self.assertEqual(decode_codon(57), b'TGC')
        for value in range(64):
            self.assertEqual(encode_codon(decode_codon(value)), value)
        with self.assertRaises(ValueError):
            decode_codon(-1)
        with self.assertRaises(ValueError):
            decode_codon(64)

    def test_translate_codon(self) -> None:
        self.assertEqual(len(CODON_TABLE), 64)
        self.assertEqual(translate_codon(b'ATG'), b'M')
        self.assertEqual(translate_codon(b'tgg'), b'W')
        self.assertEqual(translate_codon(b'GGA'), b'G')
        self.assertEqual(translate_codon(b'AGA'), b'R')
        self.assertEqual(translate_codon(b'TAG'), b'*')
        self.assertEqual(translate_codon(b'NNN'), b'X')
        self.assertEqual(STOP_CODONS, {b'TAA', b'TAG', b'TGA'})


if __name__ == '__main__':
    unittest.main()
