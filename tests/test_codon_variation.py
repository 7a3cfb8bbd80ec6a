import unittest
from codonvar.codon_variation import (
    CodonVariation,
    CodonVariationType,
    describe_codon_variation,
    join_codon_variations
)


class TestCodonVariation(unittest.TestCase):

    def test_kinds(self) -> None:
        self.assertTrue(
            CodonVariation(0, 0, CodonVariationType.DELETION).is_deletion())
        self.assertTrue(
            CodonVariation(0, 0, CodonVariationType.FRAMESHIFT)
            .is_frameshift())
        self.assertTrue(
            CodonVariation(0, 0, CodonVariationType.INSERTION).is_insertion())
        self.assertTrue(
            CodonVariation(0, 0, CodonVariationType.MODIFICATION)
            .is_modification())
        self.assertFalse(
            CodonVariation(0, 0, CodonVariationType.DELETION)
            .is_modification())

    def test_equality(self) -> None:
        var = CodonVariation(2, 48, CodonVariationType.MODIFICATION)
        self.assertEqual(
            var, CodonVariation(2, 48, CodonVariationType.MODIFICATION))
        self.assertEqual(
            hash(var),
            hash(CodonVariation(2, 48, CodonVariationType.MODIFICATION)))
        self.assertNotEqual(
            var, CodonVariation(2, 48, CodonVariationType.INSERTION))
        self.assertNotEqual(
            var, CodonVariation(1, 48, CodonVariationType.MODIFICATION))
        self.assertNotEqual(
            var, CodonVariation(2, 49, CodonVariationType.MODIFICATION))

    def test_codon(self) -> None:
        self.assertEqual(
            CodonVariation(0, 30, CodonVariationType.MODIFICATION).codon,
            b'CTG')
        self.assertEqual(
            CodonVariation(0, -1, CodonVariationType.DELETION).codon, b'')

    def test_describe(self) -> None:
        self.assertEqual(
            describe_codon_variation(
                CodonVariation(0, 30, CodonVariationType.MODIFICATION),
                b'ATG'),
            'M1L')
        self.assertEqual(
            describe_codon_variation(
                CodonVariation(2, 48, CodonVariationType.MODIFICATION),
                b'TAG'),
            '*3*')
        self.assertEqual(
            describe_codon_variation(
                CodonVariation(1, -1, CodonVariationType.DELETION), b'CTC'),
            'L2del')
        self.assertEqual(
            describe_codon_variation(
                CodonVariation(0, 63, CodonVariationType.INSERTION), b'ATG'),
            'M1insF')
        self.assertEqual(
            describe_codon_variation(
                CodonVariation(0, -1, CodonVariationType.FRAMESHIFT), b'ATG'),
            'M1fs')

    def test_join(self) -> None:
        self.assertEqual(
            join_codon_variations([
                CodonVariation(0, -1, CodonVariationType.FRAMESHIFT),
                CodonVariation(0, 57, CodonVariationType.MODIFICATION),
                CodonVariation(1, -1, CodonVariationType.DELETION),
                CodonVariation(2, 63, CodonVariationType.INSERTION),
            ]),
            '1:FS,1:TGC,2:DEL,3:INSTTT'
        )


if __name__ == '__main__':
    unittest.main()
