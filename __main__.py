''' Runs the Forth evaluator from the project directory : python . '''

from forth_interpreter import main

if __name__ == '__main__':
    main(prog_name='forth-evaluator')
