import sys
import tempfile
import unittest
from pathlib import Path
from covprior.utils.Tee import Tee

class Test_Tee(unittest.TestCase):

    def test_stdout_stderr(self):
        msg_stdout = '\n... Testing stdout'
        msg_stderr = '\n... Testing stderr'

        with tempfile.TemporaryDirectory() as folder:
            T = Tee( Path(folder) / 'log', 'test_Tee', print_stdout=False, print_stderr=False )
            with T:
                print(msg_stdout, end='')
                print(msg_stderr, file=sys.stderr, end='')

            f_read = T.stdout_file.read_text()
            self.assertTrue( f_read == msg_stdout, msg=f'\nExpected:\n\t{msg_stdout}\nGot:\n\t{f_read}' )
            f_read = T.stderr_file.read_text()
            self.assertTrue( f_read == msg_stderr, msg=f'\nExpected:\n\t{msg_stderr}\nGot:\n\t{f_read}' )

    def test_streams_restored_after_exception(self):
        stdout, stderr = sys.stdout, sys.stderr
        with tempfile.TemporaryDirectory() as folder:
            T = Tee( folder, 'test_Tee', print_stdout=False, print_stderr=False )
            with self.assertRaises(ValueError):
                with T:
                    raise ValueError('logged')
            self.assertIn( 'ValueError: logged', T.stderr_file.read_text() )
        self.assertIs(sys.stdout, stdout)
        self.assertIs(sys.stderr, stderr)


if __name__ == "__main__":
    with Tee( Path(__file__).parent / 'log', Path(__file__).stem) as T:
        t = unittest.main(verbosity=2, exit=False, catchbreak=True)
